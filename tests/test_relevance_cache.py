"""Tests for the relevance classifier cache."""

import asyncio

import pytest

from app.models.situation import UserSituation
from app.services.relevance_cache import RelevanceCache
from app.services.relevance_service import build_profile_summary


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> RelevanceCache:
    return RelevanceCache(ttl_seconds=60, max_entries=2, clock=clock)


def _situation(**overrides) -> UserSituation:
    data = {"age": 22, "nationality": "non-eu", "region": "ile-de-france", "employment_status": "student"}
    data.update(overrides)
    return UserSituation(**data)


class TestCacheKey:
    def test_key_ignores_candidate_order(self) -> None:
        summary = build_profile_summary(_situation())
        assert RelevanceCache.build_key(summary, ["a", "b"]) == RelevanceCache.build_key(summary, ["b", "a"])

    def test_key_depends_on_profile_and_candidates(self) -> None:
        summary = build_profile_summary(_situation())
        base = RelevanceCache.build_key(summary, ["a"])
        assert base != RelevanceCache.build_key(build_profile_summary(_situation(has_children=True)), ["a"])
        assert base != RelevanceCache.build_key(summary, ["a", "c"])
        assert base != RelevanceCache.build_key(summary, ["a"], model="other-model")

    def test_region_spellings_share_a_key(self) -> None:
        slug = build_profile_summary(_situation(region="ile-de-france"))
        display = build_profile_summary(_situation(region="-Île de France"))

        assert RelevanceCache.build_key(slug, ["apl"], "m") == RelevanceCache.build_key(display, ["apl"], "m")


class TestCacheEntries:
    def test_entries_expire_after_ttl(self, cache: RelevanceCache, clock: FakeClock) -> None:
        cache.set("k", ["apl"])
        assert cache.get("k") == ("apl",)

        clock.now += 61
        assert cache.get("k") is None
        assert cache.get_stats()["entries"] == 0

    def test_oldest_entry_is_evicted(self, cache: RelevanceCache) -> None:
        cache.set("a", ["1"])
        cache.set("b", ["2"])
        cache.set("c", ["3"])

        assert cache.get("a") is None
        assert cache.get("c") == ("3",)
        assert cache.get_stats()["evictions"] == 1

    def test_invalidate(self, cache: RelevanceCache) -> None:
        cache.set("a", ["1"])
        cache.set("b", ["2"])

        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") == ("2",)

        cache.invalidate()
        assert cache.get_stats()["entries"] == 0


class TestGetOrCompute:
    async def test_hit_skips_computation(self, cache: RelevanceCache) -> None:
        cache.set("k", ["apl"])
        calls = []

        async def compute():
            calls.append(1)
            return ["other"]

        value, from_cache = await cache.get_or_compute("k", compute, timeout=1)

        assert value == ("apl",)
        assert from_cache
        assert calls == []

    async def test_concurrent_callers_share_one_call(self, cache: RelevanceCache) -> None:
        calls = []
        release = asyncio.Event()

        async def compute():
            calls.append(1)
            await release.wait()
            return ["apl"]

        first = asyncio.ensure_future(cache.get_or_compute("k", compute, timeout=1))
        second = asyncio.ensure_future(cache.get_or_compute("k", compute, timeout=1))
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(first, second)

        assert calls == [1]
        assert [value for value, _ in results] == [("apl",), ("apl",)]
        stats = cache.get_stats()
        assert stats["misses"] == 1
        assert stats["shared"] == 1
        assert cache.get("k") == ("apl",)

    async def test_timed_out_caller_still_populates_cache(self, cache: RelevanceCache) -> None:
        release = asyncio.Event()

        async def compute():
            await release.wait()
            return ["apl"]

        with pytest.raises(asyncio.TimeoutError):
            await cache.get_or_compute("k", compute, timeout=0.01)

        release.set()
        # Let the shared task finish
        for _ in range(5):
            await asyncio.sleep(0)

        assert cache.get("k") == ("apl",)

    async def test_failures_and_empty_answers_are_not_cached(self, cache: RelevanceCache) -> None:
        async def failing():
            raise RuntimeError("boom")

        async def empty():
            return []

        assert await cache.get_or_compute("k", failing, timeout=1) == (None, False)
        assert await cache.get_or_compute("k", empty, timeout=1) == (None, False)
        assert cache.get_stats()["sets"] == 0
        assert cache.get_stats()["in_flight"] == 0
