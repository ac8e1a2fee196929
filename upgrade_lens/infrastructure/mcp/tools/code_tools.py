import re
import time
from typing import Any

from upgrade_lens.domain.exceptions.domain_exceptions import InvalidProjectRootError
from upgrade_lens.infrastructure.mcp.tools.documentation_tools import READ_ONLY
from upgrade_lens.infrastructure.mcp.tools.project_aware_tool import (
    PROJECT_ROOT_PROPERTY,
    ProjectAwareTool,
)
from upgrade_lens.infrastructure.scanner.filesystem_scanner import FilesystemScanner


class FindUsagePatternsTool(ProjectAwareTool):
    """Runs a knowledge base pattern, or an ad-hoc regex, over project files."""

    tool_name = "find_usage_patterns"
    tool_description = (
        "Search the project for usage patterns defined in the knowledge base "
        "or custom regex/glob combinations."
    )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Knowledge base pattern id, or a regular expression",
                },
                "glob": {
                    "type": "string",
                    "description": "Files to search when 'pattern' is a regex (default: **/*.php)",
                    "default": "**/*.php",
                },
                "project_root": PROJECT_ROOT_PROPERTY,
            },
            "required": ["pattern"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        pattern = str(payload.get("pattern") or "")

        if not pattern:
            return self._error(
                'Parameter "pattern" is required.', started_at=started_at, code="invalid_request"
            )

        try:
            context = self._create_context(payload)
        except InvalidProjectRootError as e:
            return self._error(str(e), started_at=started_at, code="invalid_project_root")

        scanner = self._create_scanner(context)
        warnings = []

        if pattern in self.knowledge_base.list_pattern_ids():
            matches = self._create_pattern_analyzer(scanner).analyze_pattern(pattern)
            result = {"pattern_id": pattern, "matches": matches}
        else:
            glob = str(payload.get("glob") or "**/*.php")
            compiled = FilesystemScanner.compile_safe_pattern(pattern)
            if compiled is None:
                warnings.append(f"Regex {pattern} was rejected as invalid or unsafe.")
                matches = []
            else:
                matches = self._search_with_regex(scanner, glob, compiled)
            if not matches:
                warnings.append(f"No matches found for regex {pattern} within {glob}.")
            result = {"pattern_id": None, "regex": pattern, "glob": glob, "matches": matches}

        return self._success({"results": [result]}, warnings=warnings, started_at=started_at)

    @staticmethod
    def _search_with_regex(
        scanner: FilesystemScanner, glob: str, regex: re.Pattern
    ) -> list[dict[str, Any]]:
        results = []
        for path in scanner.find_by_patterns([glob]):
            evidence = scanner.find_regex_matches(path, [regex])
            if not evidence:
                continue
            results.append(
                {
                    "file": scanner.to_relative_path(path),
                    "evidence": [{"line": m.line, "evidence": m.evidence} for m in evidence],
                }
            )
        return results


class ListProjectFilesTool(ProjectAwareTool):
    """Lists project files matching glob patterns."""

    tool_name = "list_project_files"
    tool_description = "List project files matching glob patterns, honoring excluded directories."

    MAX_FILES = 500

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "patterns": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Glob patterns such as ['app/**/*.php', 'config/*.php']",
                },
                "project_root": PROJECT_ROOT_PROPERTY,
            },
            "required": ["patterns"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        patterns = payload.get("patterns")

        if isinstance(patterns, str):
            patterns = [patterns]
        if not isinstance(patterns, list) or not patterns:
            return self._error(
                'Parameter "patterns" must be a non-empty list of globs.',
                started_at=started_at,
                code="invalid_request",
            )

        try:
            context = self._create_context(payload)
        except InvalidProjectRootError as e:
            return self._error(str(e), started_at=started_at, code="invalid_project_root")

        scanner = self._create_scanner(context)
        files = [scanner.to_relative_path(p) for p in scanner.find_by_patterns(map(str, patterns))]

        warnings = []
        if len(files) > self.MAX_FILES:
            warnings.append(
                f"{len(files)} files matched; only the first {self.MAX_FILES} are listed."
            )

        return self._success(
            {"total": len(files), "files": files[: self.MAX_FILES]},
            warnings=warnings,
            started_at=started_at,
        )
