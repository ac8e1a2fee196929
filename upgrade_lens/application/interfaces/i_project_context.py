from abc import ABC, abstractmethod
from pathlib import Path


class IProjectContext(ABC):
    """Interface for the root of a project under analysis and its exclusions."""

    @property
    @abstractmethod
    def root_path(self) -> Path:
        """Absolute, resolved project root."""
        pass

    @abstractmethod
    def is_excluded(self, relative_path: str) -> bool:
        """Check if any component of a root-relative path is excluded."""
        pass
