from abc import ABC, abstractmethod
from typing import Any


class ITool(ABC):
    """Interface for a named capability exposed through tools/call.

    ``execute`` always returns a result envelope; invalid input and expected
    failures are reported as ``ok: False`` envelopes rather than exceptions.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        pass

    @property
    @abstractmethod
    def annotations(self) -> dict[str, Any]:
        pass

    @abstractmethod
    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Run the tool and return its envelope."""
        pass
