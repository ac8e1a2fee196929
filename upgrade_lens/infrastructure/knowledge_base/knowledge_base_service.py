import re
from pathlib import Path
from typing import Any, Optional

from upgrade_lens.application.interfaces.i_cache_service import ICacheService
from upgrade_lens.domain.entities.lookup_result import LookupResult
from upgrade_lens.infrastructure.cache.memory_cache import BoundedCache
from upgrade_lens.infrastructure.knowledge_base.documentation_loader import (
    DocumentationLoader,
)
from upgrade_lens.infrastructure.knowledge_base.search_index import SearchIndex

BUNDLED_KNOWLEDGE_BASE = Path(__file__).resolve().parents[2] / "resources" / "knowledge_base"
MAJOR_VERSION = re.compile(r"([0-9]{1,2})")


class KnowledgeBaseService:
    """Read access to upgrade documentation: summaries, search and lookups."""

    def __init__(
        self,
        loader: DocumentationLoader,
        search_index: SearchIndex,
        cache: Optional[ICacheService] = None,
    ):
        self.loader = loader
        self.search_index = search_index
        self.cache = cache or BoundedCache(default_ttl=3600, max_cache_size=200)

    @classmethod
    def create_default(
        cls, base_path: Optional[str | Path] = None, cache: Optional[ICacheService] = None
    ) -> "KnowledgeBaseService":
        loader = DocumentationLoader(base_path or BUNDLED_KNOWLEDGE_BASE)
        return cls(loader, SearchIndex(loader), cache)

    def summary(self) -> dict[str, Any]:
        return self.cache.remember("summary", self._build_summary)

    def search(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        return self.search_index.search(query, limit)

    def list_pattern_ids(self) -> list[str]:
        return list(self.loader.load_pattern_documents())

    def list_breaking_change_slugs(self) -> list[str]:
        return list(self.loader.load_breaking_change_documents())

    def find_pattern(self, pattern_id: str) -> LookupResult[dict[str, Any]]:
        documents = self.loader.load_pattern_documents()
        if pattern_id not in documents:
            return LookupResult.not_found(
                f'Knowledge base pattern "{pattern_id}" was not found.'
            )

        return LookupResult.found(
            self.cache.remember(f"pattern:{pattern_id}", lambda: documents[pattern_id])
        )

    def find_breaking_change(
        self, slug: str, change_id: str
    ) -> LookupResult[dict[str, Any]]:
        entries = self.loader.load_breaking_change_entries()
        entry = entries.get(f"{slug}::{change_id}")
        if entry is None:
            return LookupResult.not_found(
                f'Knowledge base breaking change entry "{change_id} ({slug})" was not found.'
            )
        return LookupResult.found(entry)

    def find_breaking_change_document(self, slug: str) -> LookupResult[dict[str, Any]]:
        documents = self.loader.load_breaking_change_documents()
        if slug not in documents:
            return LookupResult.not_found(
                f'Knowledge base breaking change document "{slug}" was not found.'
            )

        return LookupResult.found(
            self.cache.remember(f"breaking_change_doc:{slug}", lambda: documents[slug])
        )

    def list_upgrade_path_ids(self) -> list[str]:
        return list(self.loader.load_upgrade_paths())

    def find_upgrade_path(self, identifier: str) -> LookupResult[dict[str, Any]]:
        paths = self.loader.load_upgrade_paths()
        if identifier not in paths:
            return LookupResult.not_found(
                f'Knowledge base upgrade path "{identifier}" was not found.'
            )
        return LookupResult.found(paths[identifier])

    def resolve_upgrade_path_id(self, from_version: str, to_version: str) -> LookupResult[str]:
        """Map two version strings to an upgrade path id such as ``10-to-11``.

        Versions are reduced to their major number, so ``"Laravel 10.x"`` and
        ``"v10.48"`` both resolve as ``10``.
        """
        from_major = self._major_version(from_version)
        to_major = self._major_version(to_version)
        if from_major is None or to_major is None:
            invalid = from_version if from_major is None else to_version
            return LookupResult.not_found(f'Knowledge base version "{invalid}" was not found.')

        identifier = f"{from_major}-to-{to_major}"
        if identifier not in self.loader.load_upgrade_paths():
            return LookupResult.not_found(
                f'Knowledge base upgrade path "{identifier}" was not found.'
            )
        return LookupResult.found(identifier)

    def resolve_breaking_change_slug(self, version: str) -> LookupResult[str]:
        """Slug of the breaking change document for the version's major release."""
        target = self._major_version(version)
        if target is not None:
            for slug, document in self.loader.load_breaking_change_documents().items():
                if self._major_version(str(document.get("version", ""))) == target:
                    return LookupResult.found(slug)

        return LookupResult.not_found(
            f'Knowledge base breaking change document "{version}" was not found.'
        )

    @staticmethod
    def _major_version(value: str) -> Optional[str]:
        normalized = value.strip().lower().replace("laravel", "").replace("v", "")
        match = MAJOR_VERSION.search(normalized)
        if match is None:
            return None
        return match.group(1).lstrip("0") or "0"

    def _build_summary(self) -> dict[str, Any]:
        index = self.loader.load_index()
        return {
            "knowledge_base_version": index.get("knowledge_base_version"),
            "last_updated": index.get("last_updated"),
            "laravel_versions_covered": self.loader.versions_covered(),
            "base_path": str(self.loader.base_path),
            "pattern_count": len(self.loader.load_pattern_documents()),
            "breaking_change_document_count": len(
                self.loader.load_breaking_change_documents()
            ),
            "search_entry_count": self.search_index.entry_count,
        }
