"""Keeps one always-current summary post in the group topic."""

from __future__ import annotations

import logging

from bot.transport import ChatTransport
from core.constants import Messages
from core.exceptions import TransportError
from services.entry_store import EntryStore
from utils.metrics import errors_total
from utils.text import escape_markdown_v2

logger = logging.getLogger(__name__)


def format_summary(title: str, listing: str) -> str:
    """Group summary post in MarkdownV2."""
    return f"*{escape_markdown_v2(title)}*\n\n{escape_markdown_v2(listing)}"


class SummaryPublisher:
    """Deletes the previous summary post and posts a fresh one."""

    def __init__(
        self,
        store: EntryStore,
        transport: ChatTransport,
        group_id: int,
        topic_id: int,
        title: str = Messages.SUMMARY_TITLE,
    ) -> None:
        self.store = store
        self.transport = transport
        self.group_id = group_id
        self.topic_id = topic_id
        self.title = title

    async def republish(self) -> int:
        """Replace the summary post and return the new message id.

        A failed delete is ignored. A failed post raises ``TransportError``
        and leaves the stored message id untouched.
        """
        last = await self.store.get_last_message(self.group_id)
        if last is not None:
            try:
                await self.transport.delete_message(self.group_id, last.message_id)
            except Exception as e:
                logger.debug(f"Failed to delete old message {last.message_id} (might be too old): {e}")

        text = format_summary(self.title, await self.store.format_entries())
        try:
            message_id = await self.transport.send_message(
                self.group_id, text, thread_id=self.topic_id, parse_mode="MarkdownV2"
            )
        except Exception as e:
            errors_total.labels(type="api_sendMessage").inc()
            logger.error(f"Failed to send message to group {self.group_id}: {e}", exc_info=True)
            if isinstance(e, TransportError):
                raise
            raise TransportError(str(e)) from e

        if message_id:
            await self.store.set_last_message(self.group_id, message_id)
            logger.debug(f"Summary posted to {self.group_id}/{self.topic_id} as message {message_id}")
        return message_id
