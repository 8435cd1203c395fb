"""Group membership cache with separate lifetimes for allowed and denied users."""

from __future__ import annotations

import time
from typing import Callable, Optional

from cachetools import TTLCache

from core.constants import CacheDefaults
from utils.metrics import cache_total


class MembershipCache:
    """Caches membership verdicts per user.

    Positive and negative verdicts live in separate TTL tiers so a denied
    user is re-checked sooner than an allowed one. Stale items are evicted
    on read.
    """

    def __init__(
        self,
        positive_ttl: float = CacheDefaults.POSITIVE_TTL,
        negative_ttl: float = CacheDefaults.NEGATIVE_TTL,
        maxsize: int = CacheDefaults.MAX_SIZE,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize membership cache.

        Args:
            positive_ttl: Seconds an "allowed" verdict stays valid
            negative_ttl: Seconds a "denied" verdict stays valid
            maxsize: Maximum number of users per tier
            timer: Monotonic time source, injectable for tests
        """
        self.allowed = TTLCache(maxsize=maxsize, ttl=positive_ttl, timer=timer)
        self.denied = TTLCache(maxsize=maxsize, ttl=negative_ttl, timer=timer)

    def get(self, user_id: int) -> Optional[bool]:
        """Cached verdict, or ``None`` when unknown or stale."""
        if user_id in self.allowed:
            cache_total.labels(result="hit").inc()
            return True
        if user_id in self.denied:
            cache_total.labels(result="hit").inc()
            return False
        cache_total.labels(result="miss").inc()
        return None

    def set(self, user_id: int, is_allowed: bool) -> None:
        self.invalidate(user_id)
        if is_allowed:
            self.allowed[user_id] = True
        else:
            self.denied[user_id] = True

    def invalidate(self, user_id: int) -> None:
        self.allowed.pop(user_id, None)
        self.denied.pop(user_id, None)

    def clear(self) -> None:
        self.allowed.clear()
        self.denied.clear()

    def stats(self) -> dict:
        return {
            "allowed": {"size": len(self.allowed), "ttl": self.allowed.ttl},
            "denied": {"size": len(self.denied), "ttl": self.denied.ttl},
        }
