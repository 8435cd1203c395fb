"""aiogram handlers feeding messages to the availability bot."""

from __future__ import annotations

from aiogram import F, Router, types
from aiogram.filters import Command

from bot.availability_bot import AvailabilityBot
from bot.context import BotContext
from bot.error_handler import handle_bot_errors
from bot.transport import ChatTransport


class CommandHandlers:
    def __init__(self, availability_bot: AvailabilityBot, transport: ChatTransport) -> None:
        self.availability_bot = availability_bot
        self.transport = transport
        self.router = Router()
        self.router.name = "availability_commands"
        self._register()

    def setup(self, dispatcher) -> None:
        dispatcher.include_router(self.router)

    def _register(self) -> None:
        self.router.message.register(self.handle_help, Command("start", "help"))
        # Everything else, commands included, is routed by AvailabilityBot
        self.router.message.register(self.handle_text, F.text)

    def _context(self, message: types.Message) -> BotContext:
        return BotContext.from_message(message, self.transport)

    @handle_bot_errors()
    async def handle_help(self, message: types.Message) -> None:
        await self.availability_bot.send_help(self._context(message))

    @handle_bot_errors()
    async def handle_text(self, message: types.Message) -> None:
        await self.availability_bot.handle_message(self._context(message))


def setup_command_handlers(dispatcher, availability_bot: AvailabilityBot, transport: ChatTransport) -> CommandHandlers:
    handler = CommandHandlers(availability_bot, transport)
    handler.setup(dispatcher)
    return handler
