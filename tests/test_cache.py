"""
Tests for the placeholder memo cache
"""
import asyncio

import pytest

from lqip.core import cache as cache_module
from lqip.core.cache import LqipCache, get_default_cache, lqip_modern


def run(coro):
    return asyncio.run(coro)


class CountingFactory:
    """Awaitable factory that records how often it ran."""

    def __init__(self, value="data:image/webp;base64,AAAA", delay=0.0, error=None):
        self.value = value
        self.delay = delay
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


class TestLqipCache:

    def test_hit_does_not_recompute(self):
        cache = LqipCache(max_entries=4)
        factory = CountingFactory()

        async def scenario():
            first = await cache.get_or_compute("a", factory)
            second = await cache.get_or_compute("a", factory)
            return first, second

        first, second = run(scenario())
        assert first == second == factory.value
        assert factory.calls == 1
        assert "a" in cache

    def test_concurrent_misses_compute_once(self):
        cache = LqipCache(max_entries=4)
        factory = CountingFactory(delay=0.05)

        async def scenario():
            return await asyncio.gather(*(cache.get_or_compute("a", factory) for _ in range(5)))

        results = run(scenario())
        assert results == [factory.value] * 5
        assert factory.calls == 1
        assert len(cache) == 1

    def test_failure_is_shared_and_not_cached(self):
        cache = LqipCache(max_entries=4)
        failing = CountingFactory(delay=0.05, error=RuntimeError("codec crashed"))
        working = CountingFactory()

        async def scenario():
            failures = await asyncio.gather(
                *(cache.get_or_compute("a", failing) for _ in range(3)),
                return_exceptions=True
            )
            value = await cache.get_or_compute("a", working)
            return failures, value

        failures, value = run(scenario())
        assert all(isinstance(f, RuntimeError) for f in failures)
        assert failing.calls == 1
        assert value == working.value
        assert working.calls == 1

    def test_least_recently_used_is_evicted(self):
        cache = LqipCache(max_entries=2)

        async def scenario():
            await cache.get_or_compute("a", CountingFactory("A"))
            await cache.get_or_compute("b", CountingFactory("B"))
            # Touch "a" so "b" becomes the oldest entry
            await cache.get_or_compute("a", CountingFactory("unused"))
            await cache.get_or_compute("c", CountingFactory("C"))

        run(scenario())
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_clear(self):
        cache = LqipCache(max_entries=2)
        run(cache.get_or_compute("a", CountingFactory()))
        cache.clear()
        assert len(cache) == 0

    def test_rejects_empty_bound(self):
        with pytest.raises(ValueError):
            LqipCache(max_entries=0)


class TestLqipModern:

    def test_computes_and_caches_data_uri(self, png_bytes):
        cache = LqipCache(max_entries=4)

        async def scenario():
            first = await lqip_modern("hero.png", png_bytes, cache=cache)
            # Cached: the bytes are not decoded again
            second = await lqip_modern("hero.png", b"not an image", cache=cache)
            return first, second

        first, second = run(scenario())
        assert first.startswith("data:image/webp;base64,")
        assert second == first

    def test_uses_default_cache(self, png_bytes, monkeypatch):
        monkeypatch.setattr(cache_module, "_default_cache", None)

        uri = run(lqip_modern("default-key", png_bytes))

        default = get_default_cache()
        assert "default-key" in default
        assert default.max_entries >= 1
        assert uri.startswith("data:image/webp;base64,")


class TestCancellation:

    def test_waiter_takes_over_when_computing_caller_cancelled(self):
        cache = LqipCache(max_entries=4)
        slow = CountingFactory("slow", delay=10)
        fast = CountingFactory("v")

        async def scenario():
            leader = asyncio.create_task(cache.get_or_compute("a", slow))
            await asyncio.sleep(0)
            waiter = asyncio.create_task(cache.get_or_compute("a", fast))
            await asyncio.sleep(0.01)

            leader.cancel()
            with pytest.raises(asyncio.CancelledError):
                await leader
            return await waiter

        assert run(scenario()) == "v"
        assert slow.calls == 1
        assert fast.calls == 1
        assert "a" in cache

    def test_cancelled_waiter_does_not_stop_computation(self):
        cache = LqipCache(max_entries=4)
        factory = CountingFactory("v", delay=0.05)

        async def scenario():
            leader = asyncio.create_task(cache.get_or_compute("a", factory))
            await asyncio.sleep(0)
            waiter = asyncio.create_task(cache.get_or_compute("a", factory))
            await asyncio.sleep(0.01)

            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            return await leader

        assert run(scenario()) == "v"
        assert factory.calls == 1
        assert "a" in cache
