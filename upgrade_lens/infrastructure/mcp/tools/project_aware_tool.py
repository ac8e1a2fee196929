from typing import Any, Iterable, Optional

from upgrade_lens.application.tools.base_tool import BaseTool
from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)
from upgrade_lens.infrastructure.scanner.filesystem_scanner import FilesystemScanner
from upgrade_lens.infrastructure.scanner.pattern_analyzer import PatternAnalyzer
from upgrade_lens.infrastructure.scanner.project_context import ProjectContext

PROJECT_ROOT_PROPERTY = {
    "type": "string",
    "description": "Absolute path of the project to analyze (defaults to the server's project root)",
}


class ProjectAwareTool(BaseTool):
    """Base for tools that scan a project tree.

    Scanners are built per call and discarded with it.
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBaseService,
        default_project_root: str = ".",
        excluded_paths: Optional[Iterable[str]] = None,
    ):
        self.knowledge_base = knowledge_base
        self.default_project_root = default_project_root
        self.excluded_paths = tuple(
            excluded_paths if excluded_paths is not None else ProjectContext.DEFAULT_EXCLUDED
        )

    def _create_context(self, payload: dict[str, Any]) -> ProjectContext:
        root = payload.get("project_root") or self.default_project_root
        return ProjectContext(str(root), self.excluded_paths)

    def _create_scanner(self, context: ProjectContext) -> FilesystemScanner:
        return FilesystemScanner(context)

    def _create_pattern_analyzer(self, scanner: FilesystemScanner) -> PatternAnalyzer:
        return PatternAnalyzer(self.knowledge_base, scanner)
