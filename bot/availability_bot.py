"""Command routing for the availability bot.

Every private text message goes through ``AvailabilityBot.handle_message``:
username and membership gate, import claiming, then dispatch to the
per-command handler. Successful changes are answered with the user's
entries and followed by a republish of the group summary.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from bot.context import BotContext
from bot.messages import (
    ADMIN_HELP_TEXT,
    add_usage,
    format_cleared_entries,
    format_import_report,
    format_parse_error,
    format_user_entries,
    help_text,
    remove_usage,
    with_user_entries,
)
from bot.transport import ChatTransport
from core.constants import ADMIN_MEMBER_STATUSES, ALLOWED_MEMBER_STATUSES, Messages
from core.exceptions import (
    AmbiguousEntryError,
    ConfigurationError,
    EntryError,
    EntryNotFoundError,
    TransportError,
)
from core.logger import get_logger
from database.models import Entry
from services.airport_timezone import AirportTimezoneResolver
from services.entry_parser import EntryParser, RemoveTarget
from services.entry_store import EntryStore
from services.membership_cache import MembershipCache
from services.publisher import SummaryPublisher
from utils.dates import Clock, utc_now
from utils.metrics import commands_total, errors_total, track_command

logger = get_logger(__name__)

_COMMAND_PATTERN = re.compile(r"^/(\w+)(?:@\w+)?(?:\s+(.*))?$", re.DOTALL)


def split_command(text: str) -> Optional[Tuple[str, str]]:
    """``"/add@Bot 1115 ber ist"`` -> ``("add", "1115 ber ist")``."""
    match = _COMMAND_PATTERN.match(text)
    if not match:
        return None
    return match.group(1).lower(), (match.group(2) or "").strip()


class AvailabilityBot:
    """Routes commands to the entry store and formats replies."""

    def __init__(
        self,
        store: EntryStore,
        parser: EntryParser,
        resolver: AirportTimezoneResolver,
        transport: ChatTransport,
        group_id: int,
        topic_id: int,
        membership_cache: Optional[MembershipCache] = None,
        publisher: Optional[SummaryPublisher] = None,
        clock: Clock = utc_now,
    ) -> None:
        if not group_id:
            raise ConfigurationError("GROUP_ID environment variable is required")
        if not topic_id:
            raise ConfigurationError("TOPIC_ID environment variable is required")

        self.store = store
        self.parser = parser
        self.resolver = resolver
        self.transport = transport
        self.group_id = group_id
        self.topic_id = topic_id
        self.membership_cache = membership_cache or MembershipCache()
        self.publisher = publisher or SummaryPublisher(store, transport, group_id, topic_id)
        self._clock = clock

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------
    async def is_group_member(self, user_id: int) -> bool:
        """Membership of the target group, cached. Fails closed."""
        cached = self.membership_cache.get(user_id)
        if cached is not None:
            return cached

        try:
            status = await self.transport.get_member_status(self.group_id, user_id)
        except Exception as e:
            errors_total.labels(type="api_getChatMember").inc()
            logger.warning(f"Failed to check group membership for {user_id}: {e}")
            self.membership_cache.set(user_id, False)
            return False

        is_allowed = status in ALLOWED_MEMBER_STATUSES
        self.membership_cache.set(user_id, is_allowed)
        logger.debug(f"Membership check for {user_id}: status={status} allowed={is_allowed}")
        return is_allowed

    async def is_group_admin(self, user_id: int) -> bool:
        """Administrator or creator of the target group. Never cached, fails closed."""
        try:
            status = await self.transport.get_member_status(self.group_id, user_id)
        except Exception as e:
            errors_total.labels(type="api_getChatMember").inc()
            logger.warning(f"Failed to check admin status for {user_id}: {e}")
            return False
        return status in ADMIN_MEMBER_STATUSES

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    async def handle_message(self, ctx: BotContext) -> None:
        text = (ctx.text or "").strip()
        if not text:
            return

        # Commands are private-only; group chatter is never answered
        if not ctx.chat.is_private:
            return

        username = (ctx.from_user.username or "").strip()
        if not username:
            await ctx.send(Messages.USERNAME_REQUIRED)
            return

        user_id = ctx.from_user.id
        if not await self.is_group_member(user_id):
            await ctx.send(Messages.NOT_A_MEMBER)
            return

        try:
            await self.store.claim_imports(user_id, username)
        except EntryError as e:
            logger.warning(f"Could not claim imported entries for @{username}: {e}")

        parsed = split_command(text)
        if parsed is None:
            return
        command, args = parsed

        if command == "add":
            if not args:
                await ctx.send(add_usage(self._clock()))
                return
            await self.handle_add(ctx, args, text)
        elif command in ("remove", "rm"):
            if not args:
                await ctx.send(remove_usage(self._clock()))
                return
            await self.handle_remove(ctx, args, f"/remove {args}")
        elif command == "list" and not args:
            await self.reply_with_user_entries(ctx)
        elif command == "clear" and not args:
            await self.handle_clear(ctx)
        elif command == "import":
            await self.handle_import(ctx, args)

    async def send_help(self, ctx: BotContext) -> None:
        """Help for everyone, plus the admin section for group admins."""
        if not ctx.chat.is_private:
            return
        await ctx.send(help_text(self.resolver.airport_count, self._clock()), parse_mode="MarkdownV2")
        if await self.is_group_admin(ctx.from_user.id):
            await ctx.send(ADMIN_HELP_TEXT, parse_mode="MarkdownV2")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def handle_add(self, ctx: BotContext, args: str, command_text: str) -> None:
        user_id = ctx.from_user.id
        username = ctx.from_user.username

        with track_command("add"):
            result = self.parser.parse(args, user_id, username, full_command=command_text)
            if not result.success:
                commands_total.labels(command="add", status="error").inc()
                logger.info(f"Add command parse error for @{username}: {args!r} ({result.error.value})")
                await ctx.send(format_parse_error(result.error, command_text, self._clock()))
                return

            entry = result.entry
            added = await self.store.add(entry)
            if not added.success:
                commands_total.labels(command="add", status="error").inc()
                logger.warning(f"Add command failed for @{username}: {added.error.kind}")
                await self._reply_error(ctx, added.error.user_message, added.error)
                return

            commands_total.labels(command="add", status="success").inc()
            logger.info(f"Entry added for @{username}: {entry.date} {entry.departure}-{entry.arrival}")
            await self.reply_with_user_entries(ctx)
            await self.republish()

    async def handle_remove(self, ctx: BotContext, args: str, command_text: str) -> None:
        user_id = ctx.from_user.id

        with track_command("remove"):
            target = self.parser.parse_remove_args(args)
            try:
                if target is None:
                    await self._remove_failed(ctx, command_text, remove_usage(self._clock()))
                    return
                await self._remove_target(user_id, target, command_text)
            except EntryError as e:
                await self._remove_failed(ctx, command_text, e.user_message, e)
                return

            commands_total.labels(command="remove", status="success").inc()
            logger.info(f"Entry removed for @{ctx.from_user.username}: {command_text!r}")
            await self.reply_with_user_entries(ctx)
            await self.republish()

    async def _remove_target(self, user_id: int, target: RemoveTarget, command_text: str) -> None:
        if target.date_only:
            on_date = [e for e in await self.store.list_active(user_id) if e.date == target.date]
            if not on_date:
                raise EntryNotFoundError(command_text, date_code=target.mmdd)
            if len(on_date) > 1:
                raise AmbiguousEntryError(command_text, date_code=target.mmdd)
            departure, arrival = on_date[0].departure, on_date[0].arrival
        else:
            departure, arrival = target.departure, target.arrival

        if not await self.store.remove(user_id, target.date, departure, arrival):
            raise EntryNotFoundError(command_text)

    async def _remove_failed(
        self, ctx: BotContext, command_text: str, reason: str, error: Optional[EntryError] = None
    ) -> None:
        commands_total.labels(command="remove", status="error").inc()
        logger.warning(f"Remove command failed for @{ctx.from_user.username}: {command_text!r} ({reason})")
        await self._reply_error(ctx, f'"{command_text}": {reason}', error)

    async def handle_clear(self, ctx: BotContext) -> None:
        user_id = ctx.from_user.id

        with track_command("clear"):
            entries = await self.store.list_active(user_id)
            commands_total.labels(command="clear", status="success").inc()
            if not entries:
                logger.info(f"Clear command - no entries to clear for @{ctx.from_user.username}")
                await ctx.send(Messages.NO_ENTRIES_TO_CLEAR)
                return

            await self.store.clear_all(user_id)
            logger.info(f"Cleared {len(entries)} entries for @{ctx.from_user.username}")
            await ctx.send(format_cleared_entries(entries))
            await self.republish()

    async def handle_import(self, ctx: BotContext, args: str) -> None:
        user_id = ctx.from_user.id

        with track_command("import"):
            if not await self.is_group_admin(user_id):
                commands_total.labels(command="import", status="error").inc()
                logger.warning(f"Import command denied - @{ctx.from_user.username} is not an admin")
                await ctx.send(Messages.ADMIN_ONLY)
                return

            lines = [line.strip() for line in args.splitlines() if line.strip()]
            if not lines:
                commands_total.labels(command="import", status="error").inc()
                await ctx.send(Messages.IMPORT_USAGE)
                return

            imported = 0
            failures: List[tuple] = []
            for line in lines:
                parsed = self.parser.parse_import_line(line)
                if not parsed.success:
                    failures.append((line, parsed.error))
                    continue
                added = await self.store.add(parsed.entry)
                if added.success:
                    imported += 1
                else:
                    failures.append((line, added.error.user_message))

            status = "success" if imported else "error"
            commands_total.labels(command="import", status=status).inc()
            logger.info(
                f"Import by @{ctx.from_user.username}: {len(lines)} lines, "
                f"{imported} imported, {len(failures)} failed"
            )
            await ctx.send(format_import_report(imported, failures))
            if imported:
                await self.republish()

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------
    async def user_entries(self, user_id: int) -> List[Entry]:
        return await self.store.list_active(user_id)

    async def reply_with_user_entries(self, ctx: BotContext) -> None:
        await ctx.send(format_user_entries(await self.user_entries(ctx.from_user.id)))

    async def _reply_error(self, ctx: BotContext, message: str, error: Optional[EntryError] = None) -> None:
        if error is not None and error.shows_entries:
            message = with_user_entries(message, await self.user_entries(ctx.from_user.id))
        await ctx.send(message)

    async def republish(self) -> None:
        """Refresh the group summary after a user change.

        The user already has their answer, so a failed post is not surfaced
        to them. It still reaches monitoring: the publisher logs it at ERROR
        and increments ``bot_errors_total{type="api_sendMessage"}``, which is
        the series to alert on. The scheduler path gets the exception itself.
        """
        try:
            await self.publisher.republish()
        except TransportError as e:
            logger.error(f"Summary republish failed: {e}")
