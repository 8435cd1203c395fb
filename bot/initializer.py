"""Bot initialization module."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.logger import get_logger

if TYPE_CHECKING:
    from config import Config
    from services.airport_timezone import AirportTimezoneResolver
    from services.entry_parser import EntryParser
    from services.entry_store import EntryStore
    from services.membership_cache import MembershipCache

logger = get_logger(__name__)


class BotInitializer:
    """Builds the Telegram bot and wires the command layer into it."""

    def __init__(
        self,
        config: Config,
        store: EntryStore,
        parser: EntryParser,
        resolver: AirportTimezoneResolver,
        membership_cache: MembershipCache,
    ):
        self.config = config
        self.store = store
        self.parser = parser
        self.resolver = resolver
        self.membership_cache = membership_cache

    async def initialize(self):
        """Create the bot, the summary publisher and the orchestrator.

        Returns:
            Tuple of ``(TelegramBot, AvailabilityBot)``
        """
        from bot.availability_bot import AvailabilityBot
        from bot.handlers import setup_command_handlers
        from bot.telegram_bot import TelegramBot
        from services.publisher import SummaryPublisher

        telegram_bot = TelegramBot(token=self.config.bot_token)

        publisher = SummaryPublisher(
            self.store,
            telegram_bot.transport,
            group_id=self.config.group_id,
            topic_id=self.config.topic_id,
            title=self.config.summary_title,
        )
        availability_bot = AvailabilityBot(
            store=self.store,
            parser=self.parser,
            resolver=self.resolver,
            transport=telegram_bot.transport,
            group_id=self.config.group_id,
            topic_id=self.config.topic_id,
            membership_cache=self.membership_cache,
            publisher=publisher,
        )
        logger.info("✅ Command layer initialized")

        setup_command_handlers(telegram_bot.dispatcher, availability_bot, telegram_bot.transport)
        logger.info("✅ Handlers registered")

        return telegram_bot, availability_bot
