"""
Filesystem pattern scanner.

Scan patterns may come from knowledge base documents or from tool callers, so
every regex is vetted before it runs and oversized files are never read.
"""

import logging
import os
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from upgrade_lens.application.interfaces.i_project_context import IProjectContext
from upgrade_lens.application.tools.deadline import check_deadline
from upgrade_lens.domain.entities.scan_match import ScanMatch

logger = logging.getLogger(__name__)


class FilesystemScanner:
    """Enumerates project files and evaluates glob and regex matches."""

    MAX_FILE_SIZE = 1024 * 1024

    # {n,} or {n,m}; an exact {n} cannot backtrack on its own
    RANGE_REPEAT = re.compile(r"\{[0-9]*,[0-9]*\}")
    EXACT_REPEAT = re.compile(r"\{[0-9]+\}")

    def __init__(self, context: IProjectContext):
        self._context = context
        self._root = str(context.root_path)
        self._all_files: Optional[list[str]] = None

    def all_files(self) -> list[str]:
        """Absolute paths of every non-excluded file, computed once."""
        if self._all_files is not None:
            return self._all_files

        files = []
        base_path = Path(self._root)

        for root, dirs, filenames in os.walk(base_path):
            check_deadline()
            relative_dir = Path(root).relative_to(base_path)

            dirs[:] = sorted(
                d for d in dirs if not self._context.is_excluded((relative_dir / d).as_posix())
            )

            for filename in sorted(filenames):
                file_path = Path(root) / filename
                if not file_path.is_file():
                    continue
                if self._context.is_excluded((relative_dir / filename).as_posix()):
                    continue
                files.append(str(file_path))

        self._all_files = files
        return files

    def find_by_patterns(self, patterns: Iterable[str]) -> list[str]:
        """Absolute paths whose root-relative path matches any glob."""
        regexes = [self.glob_to_regex(p) for p in patterns]
        if not regexes:
            return []

        matches: dict[str, None] = {}
        for path in self.all_files():
            relative = self.to_relative_path(path).replace(os.sep, "/")
            if any(regex.match(relative) for regex in regexes):
                matches.setdefault(path, None)

        return list(matches)

    def find_regex_matches(
        self,
        path: str,
        patterns: Iterable[Union[str, re.Pattern]],
        max_matches: int = 3,
    ) -> list[ScanMatch]:
        """Up to ``max_matches`` hits for the given regexes inside one file.

        Patterns may be strings or the output of ``compile_patterns``; callers
        scanning many files should compile once. Missing, oversized or
        unreadable files and unsafe patterns are skipped.
        """
        compiled_patterns = self.compile_patterns(patterns)
        if not compiled_patterns or max_matches <= 0:
            return []

        check_deadline()

        file_path = Path(path)
        try:
            if not file_path.is_file() or file_path.stat().st_size > self.MAX_FILE_SIZE:
                return []
            contents = file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug("Skipping unreadable file %s: %s", path, e)
            return []

        relative = self.to_relative_path(path)
        matches: list[ScanMatch] = []

        for compiled in compiled_patterns:
            for match in compiled.finditer(contents):
                matches.append(
                    ScanMatch(
                        file=relative,
                        line=contents.count("\n", 0, match.start()) + 1,
                        evidence=match.group(0).strip(),
                    )
                )
                if len(matches) >= max_matches:
                    return matches

        return matches

    def to_relative_path(self, absolute_path: str) -> str:
        if absolute_path == self._root or absolute_path.startswith(
            self._root.rstrip(os.sep) + os.sep
        ):
            return absolute_path[len(self._root):].lstrip(os.sep + "/")
        return absolute_path

    @classmethod
    def compile_patterns(
        cls, patterns: Iterable[Union[str, re.Pattern]]
    ) -> list[re.Pattern]:
        """Compile the usable patterns, dropping rejected ones."""
        compiled_patterns = []
        for pattern in patterns:
            compiled = (
                pattern if isinstance(pattern, re.Pattern) else cls.compile_safe_pattern(pattern)
            )
            if compiled is not None:
                compiled_patterns.append(compiled)
        return compiled_patterns

    @classmethod
    def compile_safe_pattern(cls, pattern: str) -> Optional[re.Pattern]:
        """Compile a regex for scanning, or None if it is empty, unsafe or invalid."""
        if not pattern:
            return None

        if cls.has_nested_quantifier(pattern):
            logger.warning("Rejected regex with nested quantifiers: %s", pattern)
            return None

        try:
            compiled = re.compile(pattern, re.MULTILINE)
            compiled.search("")
        except re.error as e:
            logger.warning("Rejected invalid regex %s: %s", pattern, e)
            return None

        return compiled

    @classmethod
    def has_nested_quantifier(cls, pattern: str) -> bool:
        """True when a group whose body repeats is itself quantified.

        Catches ``(a+)+``, ``(a{1,})*`` and ``((a+))+``: a repetition inside an
        inner group counts for every enclosing group. Escapes and character
        classes are skipped.
        """
        # One flag per open group: whether its body repeats anything.
        open_groups: list[bool] = []
        i = 0
        while i < len(pattern):
            char = pattern[i]
            if char == "\\":
                i += 2
                continue
            if char == "[":
                i = cls._skip_character_class(pattern, i)
                continue

            if char == "(":
                open_groups.append(False)
            elif char == ")":
                body_repeats = open_groups.pop() if open_groups else False
                quantified = cls._is_quantifier(pattern, i + 1)
                if body_repeats and quantified:
                    return True
                if open_groups and (body_repeats or quantified):
                    open_groups[-1] = True
            elif open_groups and cls._is_repetition(pattern, i):
                open_groups[-1] = True
            i += 1

        return False

    @classmethod
    def _is_repetition(cls, pattern: str, i: int) -> bool:
        return pattern[i] in "*+" or (
            pattern[i] == "{" and cls.RANGE_REPEAT.match(pattern, i) is not None
        )

    @classmethod
    def _is_quantifier(cls, pattern: str, i: int) -> bool:
        if i >= len(pattern):
            return False
        return (
            pattern[i] == "?"
            or cls._is_repetition(pattern, i)
            or cls.EXACT_REPEAT.match(pattern, i) is not None
        )

    @staticmethod
    def _skip_character_class(pattern: str, start: int) -> int:
        """Index just past the class opened at ``start``."""
        i = start + 1
        if i < len(pattern) and pattern[i] == "^":
            i += 1
        # A leading ] is a literal member
        if i < len(pattern) and pattern[i] == "]":
            i += 1
        while i < len(pattern):
            if pattern[i] == "\\":
                i += 2
                continue
            if pattern[i] == "]":
                return i + 1
            i += 1
        return len(pattern)

    @staticmethod
    def glob_to_regex(pattern: str) -> re.Pattern:
        normalized = pattern.replace("\\", "/").lstrip("/")
        escaped = re.escape(normalized)
        translated = (
            escaped.replace(r"\*\*/", "(?:.*/)?")
            .replace(r"\*\*", ".*")
            .replace(r"\*", "[^/]*")
            .replace(r"\?", ".")
        )
        return re.compile(f"^{translated}$", re.IGNORECASE)
