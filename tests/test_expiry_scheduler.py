"""Tests for the periodic expiry sweep."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.expiry_scheduler import ExpiryScheduler


def make_store(*counts, side_effect=None):
    store = MagicMock()
    store.cleanup_expired = AsyncMock(side_effect=side_effect or list(counts))
    return store


@pytest.mark.asyncio
async def test_run_cleanup_notifies_when_entries_expired():
    callback = AsyncMock()
    scheduler = ExpiryScheduler(make_store(2), on_entries_expired=callback)

    assert await scheduler.run_cleanup() == 2
    await scheduler.wait_for_callbacks()

    callback.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_cleanup_without_expired_entries_does_not_notify():
    callback = AsyncMock()
    scheduler = ExpiryScheduler(make_store(0), on_entries_expired=callback)

    assert await scheduler.run_cleanup() == 0
    await scheduler.wait_for_callbacks()

    callback.assert_not_awaited()


@pytest.mark.asyncio
async def test_callback_failure_is_contained(caplog):
    callback = AsyncMock(side_effect=RuntimeError("post failed"))
    scheduler = ExpiryScheduler(make_store(1), on_entries_expired=callback)

    assert await scheduler.run_cleanup() == 1
    await scheduler.wait_for_callbacks()

    assert "Error in on_entries_expired callback" in caplog.text


@pytest.mark.asyncio
async def test_store_failure_is_contained(caplog):
    scheduler = ExpiryScheduler(make_store(side_effect=RuntimeError("database is locked")))

    assert await scheduler.run_cleanup() == 0
    assert "Error during expiry cleanup" in caplog.text


@pytest.mark.asyncio
async def test_callback_does_not_block_sweep():
    release = asyncio.Event()

    async def slow_callback():
        await release.wait()

    scheduler = ExpiryScheduler(make_store(1), on_entries_expired=slow_callback)

    assert await scheduler.run_cleanup() == 1
    release.set()
    await scheduler.wait_for_callbacks()


@pytest.mark.asyncio
async def test_start_sweeps_immediately_and_repeats():
    store = make_store(side_effect=lambda: 0)
    scheduler = ExpiryScheduler(store, interval_minutes=0.0005)  # 30 ms

    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert store.cleanup_expired.await_count >= 2


@pytest.mark.asyncio
async def test_loop_survives_store_failures():
    store = make_store(side_effect=RuntimeError("boom"))
    scheduler = ExpiryScheduler(store, interval_minutes=0.0005)

    await scheduler.start()
    await asyncio.sleep(0.1)

    assert scheduler.is_running
    await scheduler.stop()
    assert store.cleanup_expired.await_count >= 2


@pytest.mark.asyncio
async def test_start_twice_warns(caplog):
    scheduler = ExpiryScheduler(make_store(side_effect=lambda: 0), interval_minutes=1)

    await scheduler.start()
    await scheduler.start()

    assert "ExpiryScheduler is already running" in caplog.text
    await scheduler.stop()


@pytest.mark.asyncio
async def test_state_transitions():
    scheduler = ExpiryScheduler(make_store(side_effect=lambda: 0), interval_minutes=1)

    assert not scheduler.is_running
    await scheduler.stop()  # no-op while stopped

    await scheduler.start()
    assert scheduler.is_running

    await scheduler.stop()
    assert not scheduler.is_running
    assert scheduler.sweep_task is None


def test_interval_seconds():
    assert ExpiryScheduler(make_store(), interval_minutes=5).interval_seconds == 300
    assert ExpiryScheduler(make_store(), interval_minutes=0.5).interval_seconds == 30


@pytest.mark.asyncio
async def test_sweep_against_real_store(store, make_entry, clock):
    callback = AsyncMock()
    scheduler = ExpiryScheduler(store, on_entries_expired=callback)
    await store.add(make_entry(expires=clock() + timedelta(minutes=10)))

    assert await scheduler.run_cleanup() == 0

    clock.advance(minutes=10)
    assert await scheduler.run_cleanup() == 1
    await scheduler.wait_for_callbacks()
    callback.assert_awaited_once()
