import re
from dataclasses import dataclass

from ..exceptions.domain_exceptions import InvalidCacheKeyError


@dataclass(frozen=True)
class CacheKey:
    """Immutable value object representing a validated cache key."""

    value: str

    KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.:\-]+$")
    MAX_LENGTH = 255

    def __post_init__(self) -> None:
        if not self.value:
            raise InvalidCacheKeyError("Cache key cannot be empty")

        if len(self.value) > self.MAX_LENGTH:
            raise InvalidCacheKeyError(
                f"Invalid cache key {self.value[:32]!r}...: longer than {self.MAX_LENGTH} characters"
            )

        if not self.KEY_PATTERN.fullmatch(self.value):
            raise InvalidCacheKeyError(
                f"Invalid cache key {self.value!r}. Keys may only contain letters, "
                "digits, underscores, hyphens, dots and colons."
            )

    def __str__(self) -> str:
        return self.value
