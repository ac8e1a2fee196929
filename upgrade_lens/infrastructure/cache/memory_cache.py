import pickle
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from upgrade_lens.application.interfaces.i_cache_service import ICacheService
from upgrade_lens.domain.exceptions.domain_exceptions import CacheValueTooLargeError
from upgrade_lens.domain.value_objects.cache_key import CacheKey


@dataclass
class _CacheEntry:
    payload: bytes
    timestamp: float
    ttl: int

    @property
    def size(self) -> int:
        return len(self.payload)


class BoundedCache(ICacheService):
    """In-memory cache bounded by entry count and aggregate serialized size.

    Values are pickled once on ``set``. When either bound would be exceeded the
    entry with the oldest timestamp is evicted until both hold. Expiry is lazy:
    ``has`` and ``get`` drop entries older than their TTL.
    """

    DEFAULT_TTL = 3600
    DEFAULT_MAX_SIZE = 100
    DEFAULT_MAX_VALUE_SIZE = 1024 * 1024

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL,
        max_cache_size: int = DEFAULT_MAX_SIZE,
        max_value_size: int = DEFAULT_MAX_VALUE_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        if max_cache_size < 1:
            raise ValueError("max_cache_size must be at least 1")
        if max_value_size < 1:
            raise ValueError("max_value_size must be at least 1")

        self._default_ttl = default_ttl
        self._max_cache_size = max_cache_size
        self._max_value_size = max_value_size
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._memory_usage = 0

    @property
    def memory_limit(self) -> int:
        return self._max_value_size * self._max_cache_size

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        CacheKey(key)

        payload = pickle.dumps(value)
        size = len(payload)

        if size > self._max_value_size:
            raise CacheValueTooLargeError(
                f"Cache value for key {key!r} is too large ({size} bytes). "
                f"Maximum allowed size is {self._max_value_size} bytes."
            )

        # An overwrite releases its old slot first so it never counts against the bounds.
        existing = self._entries.pop(key, None)
        if existing is not None:
            self._memory_usage -= existing.size

        while self._entries and (
            len(self._entries) >= self._max_cache_size
            or self._memory_usage + size > self.memory_limit
        ):
            self._evict_oldest()

        self._entries[key] = _CacheEntry(
            payload=payload,
            timestamp=self._clock(),
            ttl=self._default_ttl if ttl_seconds is None else ttl_seconds,
        )
        self._memory_usage += size

    def get(self, key: str, default: Any = None) -> Any:
        if not self.has(key):
            return default
        return pickle.loads(self._entries[key].payload)

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False

        if self._clock() - entry.timestamp > entry.ttl:
            self.forget(key)
            return False

        return True

    def forget(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._memory_usage -= entry.size

    def clear(self) -> None:
        self._entries.clear()
        self._memory_usage = 0

    def remember(
        self, key: str, compute: Callable[[], Any], ttl_seconds: Optional[int] = None
    ) -> Any:
        # A stored None reads as a miss and is recomputed.
        value = self.get(key)
        if value is not None:
            return value

        value = compute()
        self.set(key, value, ttl_seconds)
        return value

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._entries),
            "max_size": self._max_cache_size,
            "memory_usage": self._memory_usage,
            "memory_limit": self.memory_limit,
        }

    def _evict_oldest(self) -> None:
        # min() keeps the first-inserted key among equal timestamps.
        oldest_key = min(self._entries, key=lambda k: self._entries[k].timestamp)
        self.forget(oldest_key)
