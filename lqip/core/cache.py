"""
In-process memo cache for placeholders.

Placeholders are keyed by an opaque caller-chosen string. Concurrent requests
for the same uncached key share a single computation, and the cache keeps at
most `max_entries` placeholders, evicting the least recently used one.
"""
import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Optional

from lqip.config import get_settings
from lqip.core.lqip import compute_lqip_image

# Set up logging
logger = logging.getLogger(__name__)


class LqipCache:
    """
    Bounded, single-flight memo of data-URIs.

    Example:
        cache = LqipCache(max_entries=100)
        uri = await cache.get_or_compute("avatar:42", compute)
    """

    def __init__(self, max_entries: int):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self._in_flight: Dict[str, asyncio.Future] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_compute(self, key: str, factory: Callable[[], Awaitable[str]]) -> str:
        """
        Return the cached value for key, computing it with factory if needed.

        Only one factory call runs per uncached key; other callers await it.
        A failed computation is not cached and its exception is raised in
        every waiting caller. If the computing caller is cancelled, a waiter
        takes over the computation.
        """
        # No await between lookup and registration, so the event loop
        # serializes concurrent callers up to here.
        while True:
            if key in self._entries:
                self._entries.move_to_end(key)
                logger.debug(f"Placeholder cache hit for {key!r}")
                return self._entries[key]

            future = self._in_flight.get(key)
            if future is None:
                break

            logger.debug(f"Waiting for in-flight placeholder for {key!r}")
            try:
                return await asyncio.shield(future)
            except asyncio.CancelledError:
                # The computing caller was cancelled, not this one: start over
                if future.cancelled():
                    continue
                raise

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future

        try:
            value = await factory()
        except asyncio.CancelledError:
            self._in_flight.pop(key, None)
            future.cancel()
            raise
        except Exception as e:
            self._in_flight.pop(key, None)
            future.set_exception(e)
            # Mark retrieved so a future nobody waited on does not log a warning
            future.exception()
            raise

        self._in_flight.pop(key, None)
        self._store(key, value)
        future.set_result(value)
        return value

    def _store(self, key: str, value: str) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted placeholder {evicted!r} from cache")


_default_cache: Optional[LqipCache] = None


def get_default_cache() -> LqipCache:
    """Return the process-wide placeholder cache, creating it on first use."""
    global _default_cache
    if _default_cache is None:
        _default_cache = LqipCache(get_settings().cache_max_entries)
    return _default_cache


async def lqip_modern(key: str, input_data: bytes, cache: Optional[LqipCache] = None) -> str:
    """
    Return the placeholder data-URI for key, computing it on a cache miss.

    Args:
        key: Opaque cache key chosen by the caller (e.g. an image URL)
        input_data: Raw bytes of the image, only used on a cache miss
        cache: Cache to use (defaults to the process-wide cache)

    Returns:
        A data:image/webp;base64,... URI computed with default options
    """
    if cache is None:
        cache = get_default_cache()

    async def compute() -> str:
        result = await compute_lqip_image(input_data)
        return result.metadata.data_uri_base64

    return await cache.get_or_compute(key, compute)
