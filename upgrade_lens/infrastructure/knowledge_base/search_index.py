from dataclasses import dataclass
from typing import Any

from upgrade_lens.infrastructure.knowledge_base.documentation_loader import (
    DocumentationLoader,
)


@dataclass(frozen=True)
class IndexEntry:
    type: str
    id: str
    title: str
    summary: str
    metadata: dict[str, Any]
    search_tokens: str


class SearchIndex:
    """Term-containment search over breaking changes and patterns.

    A result's score is the number of query terms found in its tokens.
    """

    SUMMARY_LENGTH = 200

    def __init__(self, loader: DocumentationLoader):
        self._entries = self._build_entries(loader)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def search(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        terms = [t.lower() for t in query.split()]
        if not terms or limit <= 0:
            return []

        results = []
        for entry in self._entries:
            score = sum(1 for term in terms if term in entry.search_tokens)
            if score == 0:
                continue
            results.append(
                {
                    "type": entry.type,
                    "id": entry.id,
                    "title": entry.title,
                    "summary": entry.summary,
                    "metadata": entry.metadata,
                    "score": score,
                }
            )

        results.sort(key=lambda r: (-r["score"], r["type"], r["title"]))
        return results[:limit]

    def _build_entries(self, loader: DocumentationLoader) -> list[IndexEntry]:
        entries = []

        for identifier, change in loader.load_breaking_change_entries().items():
            entries.append(
                self._create_entry(
                    type="breaking_change",
                    id=identifier,
                    title=str(change.get("title") or change["id"]),
                    summary=self._summarize(change.get("description", "")),
                    metadata={
                        "slug": change.get("slug"),
                        "version": change.get("version"),
                        "severity": change.get("severity"),
                        "category": change.get("category"),
                    },
                    extra_tokens=[
                        change.get("id"),
                        change.get("severity"),
                        change.get("category"),
                        change.get("version"),
                    ],
                )
            )

        for pattern_id, pattern in loader.load_pattern_documents().items():
            versions = list(pattern.get("applies_to_versions", []))
            entries.append(
                self._create_entry(
                    type="pattern",
                    id=pattern_id,
                    title=str(pattern.get("name") or pattern_id),
                    summary=self._summarize(pattern.get("description", "")),
                    metadata={
                        "category": pattern.get("category"),
                        "complexity": pattern.get("complexity"),
                        "applies_to_versions": versions,
                    },
                    extra_tokens=versions
                    + [pattern.get("category"), pattern.get("complexity")],
                )
            )

        return entries

    @staticmethod
    def _create_entry(
        type: str,
        id: str,
        title: str,
        summary: str,
        metadata: dict[str, Any],
        extra_tokens: list[Any],
    ) -> IndexEntry:
        extra = " ".join(str(t) for t in extra_tokens if t)
        tokens = " ".join(part for part in (title, summary, extra) if part)
        return IndexEntry(
            type=type,
            id=id,
            title=title,
            summary=summary,
            metadata=metadata,
            search_tokens=tokens.strip().lower(),
        )

    @classmethod
    def _summarize(cls, text: str) -> str:
        trimmed = str(text).strip()
        if len(trimmed) <= cls.SUMMARY_LENGTH:
            return trimmed
        return trimmed[: cls.SUMMARY_LENGTH - 3].rstrip() + "..."
