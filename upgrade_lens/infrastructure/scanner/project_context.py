import os
from pathlib import Path
from typing import Iterable

from upgrade_lens.application.interfaces.i_project_context import IProjectContext
from upgrade_lens.domain.exceptions.domain_exceptions import InvalidProjectRootError


class ProjectContext(IProjectContext):
    """A resolved project root with directory-name exclusions."""

    DEFAULT_EXCLUDED = ("vendor", "node_modules", "storage", ".git")

    def __init__(self, root_path: str | os.PathLike, excluded: Iterable[str] = DEFAULT_EXCLUDED):
        resolved = Path(root_path).expanduser().resolve()
        if not resolved.is_dir():
            raise InvalidProjectRootError(
                f"Project root is not an accessible directory: {root_path}"
            )

        self._root_path = resolved
        self._excluded = frozenset(e.strip("/\\") for e in excluded if e)

    @property
    def root_path(self) -> Path:
        return self._root_path

    def is_excluded(self, relative_path: str) -> bool:
        normalized = relative_path.replace("\\", "/")
        segments = [s for s in normalized.split("/") if s]

        if any(segment in self._excluded for segment in segments):
            return True

        # Multi-segment exclusions such as "bootstrap/cache" match as a prefix.
        return any(
            "/" in excluded
            and (normalized == excluded or normalized.startswith(excluded + "/"))
            for excluded in self._excluded
        )
