"""Narrow per-message context handed to the command layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from aiogram import types

from bot.transport import ChatTransport


@dataclass(frozen=True)
class UserInfo:
    id: int
    username: Optional[str] = None


@dataclass(frozen=True)
class ChatInfo:
    id: int
    type: str = "private"

    @property
    def is_private(self) -> bool:
        return self.type == "private"


@dataclass
class BotContext:
    """One inbound text message and the means to answer it."""

    text: Optional[str]
    from_user: UserInfo
    chat: ChatInfo
    transport: ChatTransport

    async def send(self, text: str, parse_mode: Optional[str] = None) -> Optional[int]:
        """Reply in the chat the message came from."""
        return await self.transport.send_message(self.chat.id, text, parse_mode=parse_mode)

    @classmethod
    def from_message(cls, message: types.Message, transport: ChatTransport) -> "BotContext":
        user = message.from_user
        return cls(
            text=message.text,
            from_user=UserInfo(id=user.id, username=user.username) if user else UserInfo(id=0),
            chat=ChatInfo(id=message.chat.id, type=str(getattr(message.chat.type, "value", message.chat.type))),
            transport=transport,
        )
