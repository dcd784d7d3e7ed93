import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


def _is_stale(stored_at: float, ttl_seconds: float, now: float) -> bool:
    return now - stored_at >= ttl_seconds


class MemoryCache:
    """Process-wide best-effort cache with per-entry TTL.

    A miss only costs a refetch, so entries are evicted lazily on read and
    in bulk by `prune()`.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_entries: int = 1000):
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, tuple[Any, float, float]] = {}  # key -> (value, stored_at, ttl)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at, ttl = entry
        if _is_stale(stored_at, ttl, self._clock()):
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float):
        self._entries[key] = (value, self._clock(), ttl)
        if len(self._entries) > self._max_entries:
            self.prune()

    def delete(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def prune(self) -> int:
        now = self._clock()
        stale = [k for k, (_, stored_at, ttl) in self._entries.items() if _is_stale(stored_at, ttl, now)]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.info(f"Pruned {len(stale)} expired cache entries")
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class CacheManager:
    """Typed access to the memory cache, keyed by kind and ticker."""

    def __init__(self, cache: MemoryCache | None = None):
        self.cache = cache if cache is not None else _shared_cache

    # --- Stock quote ---

    def get_stock(self, ticker: str):
        return self.cache.get(f"stock:{ticker}")

    def set_stock(self, ticker: str, result, ttl: float):
        self.cache.set(f"stock:{ticker}", result, ttl)

    # --- Financial metrics ---

    def get_metrics(self, ticker: str):
        return self.cache.get(f"metrics:{ticker}")

    def set_metrics(self, ticker: str, result, ttl: float):
        self.cache.set(f"metrics:{ticker}", result, ttl)

    # --- Historical series ---

    def get_historical(self, ticker: str, timeframe: str):
        return self.cache.get(f"historical:{ticker}:{timeframe}")

    def set_historical(self, ticker: str, timeframe: str, result, ttl: float):
        self.cache.set(f"historical:{ticker}:{timeframe}", result, ttl)

    def size(self) -> int:
        return len(self.cache)


_shared_cache = MemoryCache()
