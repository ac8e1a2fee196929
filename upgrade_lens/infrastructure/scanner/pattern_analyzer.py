import re
from typing import Any

from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)
from upgrade_lens.infrastructure.scanner.filesystem_scanner import FilesystemScanner


class PatternAnalyzer:
    """Runs knowledge base detection rules against a project through the scanner."""

    def __init__(self, knowledge_base: KnowledgeBaseService, scanner: FilesystemScanner):
        self.knowledge_base = knowledge_base
        self.scanner = scanner

    def analyze_pattern(self, pattern_id: str) -> list[dict[str, Any]]:
        """Files matching a pattern, each with its evidence.

        Returns an empty list when the pattern id is unknown or every one of
        its regexes is rejected.
        """
        lookup = self.knowledge_base.find_pattern(pattern_id)
        if not lookup.is_found:
            return []

        detection = lookup.value.get("detection", {})
        file_patterns = detection.get("file_patterns") or detection.get("paths") or []
        regexes = list(detection.get("regex_patterns", [])) + [
            re.escape(literal) for literal in detection.get("content_patterns", [])
        ]

        compiled = self.scanner.compile_patterns(regexes)
        if regexes and not compiled:
            return []

        files = (
            self.scanner.find_by_patterns(file_patterns)
            if file_patterns
            else self.scanner.all_files()
        )

        results = []
        for path in files:
            evidence = self.scanner.find_regex_matches(path, compiled)
            if compiled and not evidence:
                continue
            results.append(
                {
                    "file": self.scanner.to_relative_path(path),
                    "evidence": [
                        {"line": m.line, "evidence": m.evidence} for m in evidence
                    ],
                }
            )

        return results

