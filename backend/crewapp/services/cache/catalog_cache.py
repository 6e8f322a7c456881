"""
In-process catalog cache: shared, rarely-changing reference data (tricks, articles, products).

- Per-entry TTL with lazy expiry: a get on an expired entry evicts it and reports a miss.
  There is no background reaper.
- Unbounded entry count; the keyspace is small and operator-controlled.
- No persistence; the store resets on process restart.
- get_or_fill is single-flight: concurrent misses on the same key share one loader call
  through an in-flight Future instead of each querying the store.

One instance is built at startup (see main.lifespan) and injected into request handlers.
"""
import logging
import threading
from collections import namedtuple
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable

from crewapp.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0

FillResult = namedtuple("FillResult", ["value", "hit"])


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float  # clock.monotonic() deadline


class CatalogCache:
    def __init__(self, clock: Clock | None = None, default_ttl: float = DEFAULT_TTL_SECONDS):
        self._clock = clock or SystemClock()
        self._default_ttl = default_ttl
        self._store: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, Future] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    # --- Counters ---

    def _record(self, hit: bool) -> None:
        try:
            if hit:
                self.hits += 1
            else:
                self.misses += 1
        except Exception as e:
            # Counters are observability only
            logger.debug("cache counter update failed: %s", e)

    def _lookup(self, key: str) -> CacheEntry | None:
        """Caller holds the lock. Evicts the entry if it has expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock.monotonic() >= entry.expires_at:
            del self._store[key]
            return None
        return entry

    # --- Contract ---

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._lookup(key)
        self._record(entry is not None)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        with self._lock:
            self._store[key] = CacheEntry(key=key, value=value, expires_at=self._clock.monotonic() + ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)
            # A fill already running for this key must not write its (now stale) result
            self._in_flight.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns the number of entries removed."""
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for k in keys:
                del self._store[k]
            for k in [k for k in self._in_flight if k.startswith(prefix)]:
                del self._in_flight[k]
        if keys:
            logger.debug("cache invalidated %s key(s) with prefix %r", len(keys), prefix)
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._in_flight.clear()

    def get_or_fill(
        self,
        key: str,
        loader: Callable[[], Any],
        ttl: float | None = None,
        accept: Callable[[Any], bool] | None = None,
    ) -> FillResult:
        """
        Return the cached value for key, calling loader() on a miss and caching its result.

        accept(value) may reject a live entry (e.g. a catalog whose version is behind the
        store); a rejected entry is refilled like a miss. Only one loader runs per key at a
        time; other callers wait for it and receive the same value or the same exception.
        A failed fill caches nothing.
        """
        with self._lock:
            entry = self._lookup(key)
            if entry is not None and (accept is None or accept(entry.value)):
                hit = True
            else:
                hit = False
                future = self._in_flight.get(key)
                owner = future is None
                if owner:
                    future = Future()
                    self._in_flight[key] = future
        self._record(hit)
        if hit:
            return FillResult(entry.value, True)
        if not owner:
            return FillResult(future.result(), False)

        try:
            value = loader()
        except BaseException as e:
            with self._lock:
                if self._in_flight.get(key) is future:
                    del self._in_flight[key]
            future.set_exception(e)
            raise
        ttl = self._default_ttl if ttl is None else ttl
        with self._lock:
            if self._in_flight.get(key) is future:
                self._store[key] = CacheEntry(key=key, value=value, expires_at=self._clock.monotonic() + ttl)
                del self._in_flight[key]
        future.set_result(value)
        return FillResult(value, False)

    def stats(self) -> dict:
        with self._lock:
            keys = len(self._store)
        total = self.hits + self.misses
        return {
            "keys": keys,
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": f"{self.hits / total * 100:.1f}%" if total > 0 else "0%",
        }
