import re
from dataclasses import dataclass

from ..exceptions.domain_exceptions import InvalidProtocolVersionError


@dataclass(frozen=True)
class ProtocolVersion:
    """Immutable value object for a date-based MCP protocol revision."""

    value: str

    VERSION_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.VERSION_PATTERN.fullmatch(self.value):
            raise InvalidProtocolVersionError(
                "Invalid protocol version format. Expected YYYY-MM-DD format."
            )

    def __str__(self) -> str:
        return self.value
