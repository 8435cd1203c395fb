"""Application initialization orchestrator."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Optional

from config import Config, load_config
from core.logger import get_logger
from database import init_db_pool, run_migrations
from services import (
    AirportTimezoneResolver,
    EntryParser,
    EntryStore,
    ExpiryScheduler,
    MembershipCache,
)

logger = get_logger(__name__)


class ApplicationInitializer:
    """Orchestrates application initialization and lifecycle."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.db_pool = None
        self.resolver = None
        self.store = None
        self.parser = None
        self.membership_cache = None
        self.bot = None
        self.availability_bot = None
        self.scheduler = None
        self.web_runner = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        await self._init_database()
        self._init_services()
        await self._init_bot()
        self._init_scheduler()
        if self.config.metrics_enabled:
            await self._init_web_server()

    async def run(self) -> None:
        """Run the application until polling ends or the task is cancelled."""
        await self.scheduler.start()

        bot_task = asyncio.create_task(self.bot.start())
        logger.info("🤖 Telegram bot started")

        try:
            await bot_task
        except (KeyboardInterrupt, asyncio.CancelledError):
            logger.info("Shutting down...")
            bot_task.cancel()
            raise
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Release resources in reverse order of creation."""
        with suppress(Exception):
            if self.web_runner:
                await self.web_runner.cleanup()
        with suppress(Exception):
            if self.scheduler:
                await self.scheduler.stop()
        with suppress(Exception):
            if self.bot:
                await self.bot.stop()
        with suppress(Exception):
            if self.db_pool:
                await self.db_pool.close()
        logger.info("Shutdown complete")

    async def _init_database(self) -> None:
        """Initialize database pool and run migrations."""
        self.db_pool = await init_db_pool(
            database_path=self.config.database_path,
            pool_size=self.config.db_pool_size,
            busy_timeout_ms=self.config.db_busy_timeout,
        )
        await run_migrations(self.db_pool)
        logger.info("✅ Database initialized")

    def _init_services(self) -> None:
        """Create the resolver, the store, the parser and the membership cache."""
        self.resolver = AirportTimezoneResolver(self.config.airports_csv_path)
        self.store = EntryStore(self.db_pool, max_entries_per_user=self.config.max_entries_per_user)
        self.parser = EntryParser(self.resolver)
        self.membership_cache = MembershipCache(
            positive_ttl=self.config.membership_positive_ttl,
            negative_ttl=self.config.membership_negative_ttl,
        )
        logger.info(f"✅ Services initialized ({self.resolver.airport_count} airports)")

    async def _init_bot(self) -> None:
        """Initialize Telegram bot."""
        from bot.initializer import BotInitializer

        bot_init = BotInitializer(
            self.config,
            store=self.store,
            parser=self.parser,
            resolver=self.resolver,
            membership_cache=self.membership_cache,
        )
        self.bot, self.availability_bot = await bot_init.initialize()
        logger.info("✅ Bot initialized successfully")

    def _init_scheduler(self) -> None:
        """Expire entries periodically and refresh the group summary afterwards."""
        self.scheduler = ExpiryScheduler(
            self.store,
            interval_minutes=self.config.expiry_interval_minutes,
            on_entries_expired=self.availability_bot.publisher.republish,
        )

    async def _init_web_server(self) -> None:
        """Initialize health and metrics server."""
        from web import create_app, start_web_server

        app = create_app(self.store, self.bot.transport)
        self.web_runner = await start_web_server(app, self.config.metrics_host, self.config.metrics_port)
