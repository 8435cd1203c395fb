"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import pytest
import pytest_asyncio
from timezonefinder import TimezoneFinder

from bot.availability_bot import AvailabilityBot
from bot.context import BotContext, ChatInfo, UserInfo
from database import run_migrations
from database.connection import SQLitePool
from database.models import Entry
from helpers import AIRPORTS_CSV, GROUP_ID, TOPIC_ID, FakeClock, FakeTransport, utc
from services.airport_timezone import AirportTimezoneResolver
from services.entry_parser import EntryParser
from services.entry_store import EntryStore
from services.membership_cache import MembershipCache
from utils.dates import to_millis


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc("2025-11-13T10:00:00"))


@pytest.fixture(scope="session")
def finder() -> TimezoneFinder:
    return TimezoneFinder()


@pytest.fixture
def resolver(finder, clock) -> AirportTimezoneResolver:
    return AirportTimezoneResolver(AIRPORTS_CSV, finder=finder, clock=clock)


@pytest.fixture
def parser(resolver, clock) -> EntryParser:
    return EntryParser(resolver, clock=clock)


@pytest_asyncio.fixture
async def pool(tmp_path):
    db_pool = SQLitePool(str(tmp_path / "availability.sqlite"))
    await db_pool.init_pool()
    await run_migrations(db_pool)
    yield db_pool
    await db_pool.close()


@pytest.fixture
def store(pool, clock) -> EntryStore:
    return EntryStore(pool, clock=clock)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def availability_bot(store, parser, resolver, transport, clock) -> AvailabilityBot:
    return AvailabilityBot(
        store=store,
        parser=parser,
        resolver=resolver,
        transport=transport,
        group_id=GROUP_ID,
        topic_id=TOPIC_ID,
        membership_cache=MembershipCache(),
        clock=clock,
    )


@pytest.fixture
def make_context(transport):
    """Factory for private-chat contexts; the chat id equals the user id."""
    def factory(
        text: str,
        user_id: int = 1,
        username: Optional[str] = "alice",
        chat_type: str = "private",
    ) -> BotContext:
        chat_id = user_id if chat_type == "private" else GROUP_ID
        return BotContext(
            text=text,
            from_user=UserInfo(id=user_id, username=username),
            chat=ChatInfo(id=chat_id, type=chat_type),
            transport=transport,
        )
    return factory


@pytest.fixture
def make_entry(clock):
    """Factory for entries that expire a week after the fake ``now``."""
    def factory(
        user_id: Optional[int] = 1,
        date: str = "2025-11-15",
        departure: str = "BER",
        arrival: str = "IST",
        username: str = "alice",
        expires: Optional[datetime] = None,
    ) -> Entry:
        return Entry(
            user_id=user_id,
            username=username,
            date=date,
            departure=departure,
            arrival=arrival,
            original_text=f"/add {date[5:7]}{date[8:]} {departure} {arrival}",
            expiry_timestamp=to_millis(expires or clock() + timedelta(days=7)),
        )
    return factory
