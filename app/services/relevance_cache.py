"""
TTL cache for relevance classifier answers, with single-flight computation.

Concurrent requests for the same key share one in-flight classifier call.
A caller that gives up on its timeout does not cancel the shared call; its
answer is still cached for the next request.
"""
import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from ..config import settings

logger = logging.getLogger(__name__)

CacheValue = Tuple[str, ...]


class RelevanceCache:
    """In-memory relevance cache keyed by profile summary and candidate set"""

    def __init__(
        self,
        ttl_seconds: int = settings.relevance_cache_ttl_seconds,
        max_entries: int = settings.relevance_cache_max_entries,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[CacheValue, float]]" = OrderedDict()
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "evictions": 0, "shared": 0}

    @staticmethod
    def build_key(profile_summary: str, candidate_ids: List[str], model: str = "") -> str:
        """
        Deterministic key over what the classifier is shown: the profile summary,
        the candidate id set and the model
        """
        payload = json.dumps(
            {
                "profile": profile_summary,
                "candidates": sorted(set(candidate_ids)),
                "model": model,
            },
            sort_keys=True,
        )
        return hashlib.sha256(payload.encode()).hexdigest()

    def get(self, key: str) -> Optional[CacheValue]:
        """Return a live entry or None. Expired entries are dropped on read."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None

        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            self._stats["misses"] += 1
            return None

        self._stats["hits"] += 1
        return value

    def set(self, key: str, value: List[str]):
        """Store an answer for the configured TTL"""
        self._entries[key] = (tuple(value), self._clock() + self.ttl_seconds)
        self._entries.move_to_end(key)
        self._stats["sets"] += 1

        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            self._stats["evictions"] += 1

    def invalidate(self, key: Optional[str] = None):
        """
        Invalidate cache entries.
        If key is None, clears everything.
        """
        if key:
            self._entries.pop(key, None)
        else:
            self._stats["evictions"] += len(self._entries)
            self._entries.clear()

    def get_stats(self) -> dict:
        """Return cache statistics."""
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = (self._stats["hits"] / total * 100) if total > 0 else 0.0
        return {
            **self._stats,
            "hit_rate_pct": round(hit_rate, 2),
            "entries": len(self._entries),
            "in_flight": len(self._in_flight),
            "ttl_seconds": self.ttl_seconds,
        }

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Optional[List[str]]]],
        timeout: float,
    ) -> Tuple[Optional[CacheValue], bool]:
        """
        Return a cached answer, or join/start the single in-flight computation

        Args:
            key: Cache key from build_key
            compute: Coroutine factory returning retained ids, or None when unusable
            timeout: Seconds this caller is willing to wait

        Returns:
            (value, from_cache); value is None when the computation produced nothing usable

        Raises:
            asyncio.TimeoutError: when this caller's wait exceeds timeout
        """
        # Joining a running computation counts as shared, not as a miss
        task = self._in_flight.get(key)
        if task is not None:
            self._stats["shared"] += 1
            logger.debug(f"Joining in-flight relevance computation {key[:12]}")
        else:
            cached = self.get(key)
            if cached is not None:
                return cached, True
            task = asyncio.ensure_future(self._run(key, compute))
            self._in_flight[key] = task

        value = await asyncio.wait_for(asyncio.shield(task), timeout)
        return value, False

    async def _run(
        self,
        key: str,
        compute: Callable[[], Awaitable[Optional[List[str]]]],
    ) -> Optional[CacheValue]:
        try:
            value = await compute()
        except Exception as e:
            logger.warning(f"Relevance computation failed: {e}")
            return None
        finally:
            self._in_flight.pop(key, None)

        if not value:
            return None

        # Only usable answers are cached
        self.set(key, value)
        return tuple(value)


# Global relevance cache instance
relevance_cache = RelevanceCache()
