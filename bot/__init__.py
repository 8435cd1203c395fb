"""Telegram-facing layer."""

from .context import BotContext, ChatInfo, UserInfo
from .transport import AiogramTransport, ChatTransport

__all__ = [
    "AiogramTransport",
    "BotContext",
    "ChatInfo",
    "ChatTransport",
    "UserInfo",
]
