"""Chat transport capability consumed by the bot and the publisher."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from asyncio_throttle import Throttler

from core.constants import TelegramLimits
from core.exceptions import TransportError
from core.logger import get_logger
from utils.metrics import api_calls_total

logger = get_logger(__name__)


@runtime_checkable
class ChatTransport(Protocol):
    """The three chat operations the application needs.

    Implementations raise ``TransportError`` when a call fails.
    """

    async def send_message(
        self,
        chat_id: int,
        text: str,
        thread_id: Optional[int] = None,
        parse_mode: Optional[str] = None,
    ) -> Optional[int]:
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        ...

    async def get_member_status(self, chat_id: int, user_id: int) -> str:
        ...


class AiogramTransport:
    """``ChatTransport`` backed by an aiogram ``Bot``, throttled per second."""

    def __init__(self, bot: Bot, rate_limit: int = TelegramLimits.SEND_RATE_LIMIT) -> None:
        self.bot = bot
        self.throttler = Throttler(rate_limit=rate_limit, period=1.0)

    async def send_message(
        self,
        chat_id: int,
        text: str,
        thread_id: Optional[int] = None,
        parse_mode: Optional[str] = None,
    ) -> Optional[int]:
        try:
            async with self.throttler:
                message = await self.bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    message_thread_id=thread_id,
                    parse_mode=parse_mode,
                )
        except TelegramAPIError as e:
            api_calls_total.labels(method="sendMessage", status="error").inc()
            raise TransportError(f"sendMessage to {chat_id} failed: {e}") from e
        api_calls_total.labels(method="sendMessage", status="success").inc()
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            async with self.throttler:
                await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramAPIError as e:
            api_calls_total.labels(method="deleteMessage", status="error").inc()
            raise TransportError(f"deleteMessage {message_id} in {chat_id} failed: {e}") from e
        api_calls_total.labels(method="deleteMessage", status="success").inc()

    async def get_member_status(self, chat_id: int, user_id: int) -> str:
        try:
            async with self.throttler:
                member = await self.bot.get_chat_member(chat_id=chat_id, user_id=user_id)
        except TelegramAPIError as e:
            api_calls_total.labels(method="getChatMember", status="error").inc()
            raise TransportError(f"getChatMember {user_id} in {chat_id} failed: {e}") from e
        api_calls_total.labels(method="getChatMember", status="success").inc()
        status = member.status
        return getattr(status, "value", status)
