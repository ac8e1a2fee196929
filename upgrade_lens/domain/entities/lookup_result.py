from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Tagged outcome of a lookup that is allowed to miss.

    Lookups by identifier (documents, resources) return this instead of raising,
    so callers decide whether a miss is an error.
    """

    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, value: T) -> "LookupResult[T]":
        return cls(value=value)

    @classmethod
    def not_found(cls, reason: str) -> "LookupResult[Any]":
        return cls(reason=reason)

    @property
    def is_found(self) -> bool:
        return self.reason is None
