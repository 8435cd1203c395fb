"""Reply and help text builders."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from database.models import Entry
from services.entry_parser import ParseError
from services.entry_store import sort_entries
from utils.dates import example_date, utc_now


def format_user_entries(entries: List[Entry]) -> str:
    """``Your entries:`` block as shown to the entry owner."""
    if not entries:
        return "Your entries: none"
    lines = "\n".join(entry.route for entry in sort_entries(entries))
    return f"Your entries:\n{lines}"


def format_cleared_entries(entries: List[Entry]) -> str:
    lines = "\n".join(entry.route for entry in sort_entries(entries))
    return f"Cleared entries:\n{lines}\n\nYour entries: none"


def with_user_entries(message: str, entries: List[Entry]) -> str:
    """Append the user's entries after a blank line."""
    return f"{message}\n\n{format_user_entries(entries)}"


def format_parse_error(error: ParseError, quoted: str, now: Optional[datetime] = None) -> str:
    if error == ParseError.DATE_LIMIT:
        return f'Date too far in advance: "{quoted}". Entries are only allowed up to 7 days from today.'
    return f'Invalid format: "{quoted}". Use format: MMDD DEP ARR (e.g., {example_date(now or utc_now())} BER IST)'


def add_usage(now: Optional[datetime] = None) -> str:
    return f"Usage: /add MMDD DEP ARR\nExample: /add {example_date(now or utc_now())} BER IST"


def remove_usage(now: Optional[datetime] = None) -> str:
    sample = example_date(now or utc_now())
    return (
        "Usage: /remove (or /rm) MMDD DEP ARR or /remove MMDD\n"
        f"Example: /remove {sample} BER IST or /remove {sample} (if only one entry for that date)"
    )


def format_import_report(imported: int, failures: List[tuple]) -> str:
    """Summary of an ``/import`` run; ``failures`` holds ``(line, reason)`` pairs."""
    report = f"Imported {imported} entries."
    if failures:
        report += f"\n\nFailed to import {len(failures)} entries:"
        for line, reason in failures:
            report += f"\n- {line} ({reason})"
    return report


def help_text(airport_count: int, now: Optional[datetime] = None) -> str:
    """Main help in MarkdownV2, with a live example date."""
    sample = example_date(now or utc_now())
    return (
        "Hello\\! I'm your OBC One\\-Way Availability Bot\\. I will help post your availability "
        "\\/ empty legs for flights back home after your mission\\.\n"
        "\n"
        "\n"
        "💬 *How it works:*\n"
        "\n"
        "• Send me commands as private messages only\n"
        "• You must have a Telegram username \\(@username\\) to use this bot\n"
        "• I'll reply to you with your personal entries\n"
        "• Entries up to seven days in advance only\n"
        "• Up to three entries per OBC\n"
        "• Use three letter IATA code for start and final airport only\\! "
        "If you have stops in between please add a separate entry\\!\n"
        "• You don't have to manually remove outdated entries, they expire automatically at "
        f"midnight local time using location data for {airport_count:,} airports provided by OurAirports\n"
        "\n"
        "📋 *Commands Reference:*\n"
        "\n"
        "• Add entry: `/add MMDD DEP ARR` or `/add MMDD DEP / ARR` or `/add MMDD DEP\\-ARR` "
        "\\(lowercase also works\\)\n"
        "• Remove entry: `/remove MMDD DEP ARR` \\(plus same formatting variants as for `/add` "
        "plus `/rm` shorthand\\) and `/remove MMDD` \\(airports are optional if you only have one "
        "entry for that date\\)\n"
        "• Remove all your entries: `/clear`\n"
        "• List your entries: `/list`\n"
        "• Get help: `/help` or `/start`\n"
        "\n"
        "✨ *Message Examples:*\n"
        "\n"
        "📝 Adding an entry:\n"
        f"    `/add {sample} FRA BER`\n"
        "\n"
        "❌ Removing an entry:\n"
        f"    `/remove {sample} FRA BER`\n"
        f"    `/remove {sample}` \\(if only one entry for that date\\)"
    )


ADMIN_HELP_TEXT = (
    "🔧 *Admin Commands:*\n"
    "\n"
    "• Import entries: `/import`\n"
    "  Format: `MMDD DEP / ARR @username`\n"
    "  Example:\n"
    "  ```\n"
    "/import\n"
    "1122 HOT / DOG @Alice\n"
    "1123 HEL / YES @Bob\n"
    "```\n"
    "\n"
    "More admin commands will be added\\."
)
