from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class ICacheService(ABC):
    """Interface for in-process memoization with TTL and size bounds."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a value from cache, or the default when missing or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Set a value in cache with optional TTL."""
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check if a key exists in cache and has not expired."""
        pass

    @abstractmethod
    def forget(self, key: str) -> None:
        """Delete a key from cache."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached entry."""
        pass

    @abstractmethod
    def remember(
        self, key: str, compute: Callable[[], Any], ttl_seconds: Optional[int] = None
    ) -> Any:
        """Return the cached value or compute, store and return it."""
        pass

    @abstractmethod
    def stats(self) -> dict[str, int]:
        """Report entry count, memory usage and their limits."""
        pass
