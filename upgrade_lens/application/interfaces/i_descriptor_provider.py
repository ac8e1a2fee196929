from abc import ABC, abstractmethod

from mcp.types import Prompt, Resource


class IResourceProvider(ABC):
    """Interface for a read-only resource served by resources/list and resources/read."""

    @abstractmethod
    def describe(self) -> Resource:
        """Return the resource descriptor."""
        pass

    @abstractmethod
    def read(self) -> str:
        """Return the resource body as text."""
        pass


class IPromptProvider(ABC):
    """Interface for a static prompt template listed by prompts/list."""

    @abstractmethod
    def describe(self) -> Prompt:
        """Return the prompt descriptor."""
        pass
