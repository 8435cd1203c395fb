"""Periodic expiry of entries whose departure day has ended."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from core.constants import SchedulerDefaults
from services.entry_store import EntryStore
from utils.metrics import errors_total

logger = logging.getLogger(__name__)

ExpiredCallback = Callable[[], Awaitable[None]]


class ExpiryScheduler:
    """Runs an expiry sweep immediately on start and then every interval."""

    def __init__(
        self,
        store: EntryStore,
        interval_minutes: float = SchedulerDefaults.INTERVAL_MINUTES,
        on_entries_expired: Optional[ExpiredCallback] = None,
    ) -> None:
        """Initialize expiry scheduler.

        Args:
            store: Entry store to sweep
            interval_minutes: Minutes between sweeps, fractions allowed
            on_entries_expired: Coroutine function called after a sweep that
                removed at least one entry
        """
        self.store = store
        self.interval_minutes = interval_minutes
        self.on_entries_expired = on_entries_expired
        self.running = False
        self.sweep_task: Optional[asyncio.Task] = None
        self._callback_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self.running

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    async def start(self) -> None:
        """Start the periodic sweep."""
        if self.running:
            logger.warning("ExpiryScheduler is already running")
            return

        self.running = True
        self.sweep_task = asyncio.create_task(self.sweep_loop())
        logger.info(f"Starting expiry scheduler - cleanup every {self.interval_minutes:g} minutes")

    async def stop(self) -> None:
        """Stop the periodic sweep. Pending callbacks are allowed to finish."""
        if not self.running:
            return

        self.running = False

        if self.sweep_task:
            self.sweep_task.cancel()
            try:
                await self.sweep_task
            except asyncio.CancelledError:
                pass
            self.sweep_task = None

        await self.wait_for_callbacks()
        logger.info("ExpiryScheduler stopped")

    async def sweep_loop(self) -> None:
        """Sweep now, then once per interval until stopped."""
        while self.running:
            await self.run_cleanup()
            await asyncio.sleep(self.interval_seconds)

    async def run_cleanup(self) -> int:
        """Run one sweep and return the number of expired entries.

        Store failures are logged and counted; they never propagate.
        """
        try:
            removed = await self.store.cleanup_expired()
        except Exception as e:
            errors_total.labels(type="expiry_cleanup").inc()
            logger.error(f"Error during expiry cleanup: {e}", exc_info=True)
            return 0

        if removed > 0:
            logger.info(f"Expiry cleanup: removed {removed} expired entry/entries")
            self._notify()
        else:
            logger.debug("Expiry cleanup: no expired entries found")
        return removed

    def _notify(self) -> None:
        if self.on_entries_expired is None:
            return
        task = asyncio.create_task(self._run_callback(self.on_entries_expired))
        self._callback_tasks.add(task)
        task.add_done_callback(self._callback_tasks.discard)

    @staticmethod
    async def _run_callback(callback: ExpiredCallback) -> None:
        try:
            await callback()
        except Exception as e:
            errors_total.labels(type="expiry_callback").inc()
            logger.error(f"Error in on_entries_expired callback: {e}", exc_info=True)

    async def wait_for_callbacks(self) -> None:
        """Wait for every callback started by previous sweeps."""
        if self._callback_tasks:
            await asyncio.gather(*list(self._callback_tasks))
