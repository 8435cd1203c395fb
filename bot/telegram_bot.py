"""Telegram bot wrapper around aiogram."""

from __future__ import annotations

from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from bot.transport import AiogramTransport
from core.constants import TelegramLimits


class TelegramBot:
    """Owns the aiogram bot, its dispatcher and the throttled transport."""

    def __init__(self, token: str, rate_limit: int = TelegramLimits.SEND_RATE_LIMIT) -> None:
        self.bot = Bot(token=token)
        self.storage = MemoryStorage()
        self.dispatcher = Dispatcher(storage=self.storage)
        self.transport = AiogramTransport(self.bot, rate_limit=rate_limit)

    async def start(self) -> None:
        await self.dispatcher.start_polling(self.bot, handle_signals=False)

    async def stop(self) -> None:
        # Raises when polling has already finished
        with suppress(RuntimeError):
            await self.dispatcher.stop_polling()
        await self.dispatcher.storage.close()
        await self.bot.session.close()
