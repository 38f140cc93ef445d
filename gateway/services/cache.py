"""
ResponseCache - In-memory response cache with TTL and bounded size.

Features:
- Deterministic fingerprints derived from adapter name and request shape
- TTL expiry, checked lazily on read
- Insertion-order eviction when the store is full
- Hit/miss counters safe under concurrent async callers
"""

import asyncio
import json
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from loguru import logger

from gateway.services.errors import CacheError
from gateway.services.models import FINGERPRINT_SEPARATOR

CACHEABLE_METHODS = frozenset({"GET"})
CACHEABLE_STATUS_CODES = frozenset(range(200, 207))


@dataclass(frozen=True)
class CacheKey:
    """Components a cache fingerprint is derived from."""

    adapter_name: str
    method: str
    path: str
    params: dict[str, str] | None = None
    body: Any = None

    def fingerprint(self) -> str:
        """
        Render the deterministic string key for this request.

        Raises CacheError if params or body cannot be serialized.
        """
        try:
            params = (
                json.dumps(self.params, sort_keys=True, separators=(",", ":"))
                if self.params
                else ""
            )
            body = (
                json.dumps(self.body, sort_keys=True, separators=(",", ":"))
                if self.body is not None
                else ""
            )
        except (TypeError, ValueError) as e:
            raise CacheError(
                f"Cannot fingerprint request: {e}", adapter_name=self.adapter_name
            ) from e

        # The separator is kept out of the path component; "%7C" is the same URL
        path = self.path.replace(FINGERPRINT_SEPARATOR, "%7C")
        return FINGERPRINT_SEPARATOR.join(
            [self.adapter_name, self.method.upper(), path, params, body]
        )


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    data: Any
    inserted_at: float
    ttl: timedelta

    def is_expired(self, now: float) -> bool:
        """Check if entry is past its TTL."""
        return now >= self.inserted_at + self.ttl.total_seconds()


class ResponseCache:
    """
    Async-compatible response cache keyed by request fingerprint.

    Usage:
        cache = ResponseCache(max_size=1000, ttl=timedelta(minutes=5))

        key = CacheKey("weather-api", "GET", "/current", {"q": "Berlin"})
        cached = await cache.get(key.fingerprint())
        if cached is None:
            data = await fetch()
            await cache.put(key.fingerprint(), data)
    """

    def __init__(
        self,
        enabled: bool = True,
        max_size: int = 1000,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], float] = time.monotonic,
        debug: bool = False,
    ):
        self._store: dict[str, CacheEntry] = {}
        self._enabled = enabled
        self._max_size = max_size
        self._ttl = ttl
        self._clock = clock
        self._debug = debug
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

        logger.info(
            f"Cache initialized with TTL: {ttl.total_seconds()}s, Max Size: {max_size}"
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def get(self, fingerprint: str) -> Any | None:
        """
        Get value from cache.

        Returns the stored value if present and unexpired, None otherwise.
        """
        if not self._enabled:
            return None

        async with self._lock:
            entry = self._store.get(fingerprint)

            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {fingerprint[:50]}...")
                return None

            if entry.is_expired(self._clock()):
                del self._store[fingerprint]
                self._stats.misses += 1
                self._log(f"EXPIRED: {fingerprint[:50]}...")
                return None

            self._stats.hits += 1
            self._log(f"HIT: {fingerprint[:50]}...")
            return entry.data

    async def put(self, fingerprint: str, data: Any) -> None:
        """Store a value, evicting the oldest insertion if the store is full."""
        if not self._enabled:
            return

        async with self._lock:
            # Re-insertion moves the key to the newest position
            self._store.pop(fingerprint, None)

            if len(self._store) >= self._max_size:
                self._purge_expired()
            if len(self._store) >= self._max_size:
                self._evict_oldest()

            self._store[fingerprint] = CacheEntry(
                data=data, inserted_at=self._clock(), ttl=self._ttl
            )
            self._log(f"SET: {fingerprint[:50]}... (TTL: {self._ttl.total_seconds()}s)")

    async def invalidate(self, fingerprint: str) -> bool:
        """Remove one entry. Returns whether it was present."""
        async with self._lock:
            if self._store.pop(fingerprint, None) is not None:
                self._log(f"INVALIDATE: {fingerprint[:50]}...")
                return True
            return False

    async def invalidate_by_adapter(self, adapter_name: str) -> int:
        """
        Invalidate every entry derived from the given adapter.

        Returns:
            Number of entries invalidated
        """
        prefix = f"{adapter_name}{FINGERPRINT_SEPARATOR}"
        async with self._lock:
            keys_to_delete = [k for k in self._store if k.startswith(prefix)]
            for key in keys_to_delete:
                del self._store[key]

        logger.info(
            f"Invalidated {len(keys_to_delete)} cache entries for adapter: {adapter_name}"
        )
        return len(keys_to_delete)

    async def clear(self) -> None:
        """Clear all cache entries and reset hit/miss counters."""
        async with self._lock:
            count = len(self._store)
            self._store.clear()
            self._stats.hits = 0
            self._stats.misses = 0
            self._stats.evictions = 0
        logger.info(f"Cache cleared: {count} entries removed")

    async def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        async with self._lock:
            return self._purge_expired()

    def should_cache(self, method: str, status_code: int) -> bool:
        """Only successful GET responses with a representable body are cached."""
        if not self._enabled:
            return False
        return (
            method.upper() in CACHEABLE_METHODS
            and status_code in CACHEABLE_STATUS_CODES
        )

    def _purge_expired(self) -> int:
        now = self._clock()
        expired_keys = [k for k, v in self._store.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._store[key]

        if expired_keys:
            self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")
        return len(expired_keys)

    def _evict_oldest(self) -> None:
        """Evict the entry inserted least recently."""
        if not self._store:
            return

        oldest_key = next(iter(self._store))
        del self._store[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:50]}...")

    def get_stats(self) -> "CacheStats":
        """Get a snapshot of cache statistics."""
        return CacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            evictions=self._stats.evictions,
            size=len(self._store),
            max_size=self._max_size,
            enabled=self._enabled,
        )

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[ResponseCache] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0
    enabled: bool = True

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage, rounded to 2 decimals."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return round(self.hits / total * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "enabled": self.enabled,
        }
