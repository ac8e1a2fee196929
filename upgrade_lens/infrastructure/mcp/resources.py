"""
Read-only knowledge base resources.

Each resource is a JSON view of the knowledge base exposed through
resources/list and resources/read.
"""

import json
from abc import abstractmethod
from typing import Any

from mcp.types import Resource

from upgrade_lens.application.interfaces.i_descriptor_provider import IResourceProvider
from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)

URI_PREFIX = "upgrade-lens://knowledge-base"


class _KnowledgeBaseResource(IResourceProvider):
    path = ""
    title = ""
    summary = ""

    def __init__(self, knowledge_base: KnowledgeBaseService):
        self.knowledge_base = knowledge_base

    def describe(self) -> Resource:
        return Resource(
            uri=f"{URI_PREFIX}/{self.path}",
            name=self.title,
            description=self.summary,
            mimeType="application/json",
        )

    def read(self) -> str:
        return json.dumps(self._payload(), indent=2)

    @abstractmethod
    def _payload(self) -> Any:
        pass


class KnowledgeBaseSummaryResource(_KnowledgeBaseResource):
    path = "summary"
    title = "Knowledge base summary"
    summary = "Version, coverage and document counts of the upgrade knowledge base."

    def _payload(self) -> Any:
        return self.knowledge_base.summary()


class PatternsIndexResource(_KnowledgeBaseResource):
    path = "patterns"
    title = "Detection patterns index"
    summary = "Identifiers and names of every detection pattern."

    def _payload(self) -> Any:
        documents = self.knowledge_base.loader.load_pattern_documents()
        return [
            {
                "id": pattern_id,
                "name": document.get("name", pattern_id),
                "category": document.get("category"),
                "applies_to_versions": document.get("applies_to_versions", []),
            }
            for pattern_id, document in documents.items()
        ]


class BreakingChangesIndexResource(_KnowledgeBaseResource):
    path = "breaking-changes"
    title = "Breaking changes index"
    summary = "Every breaking change entry grouped by document slug."

    def _payload(self) -> Any:
        index: dict[str, list[dict[str, Any]]] = {}
        for entry in self.knowledge_base.loader.load_breaking_change_entries().values():
            index.setdefault(entry["slug"], []).append(
                {
                    "id": entry["id"],
                    "title": entry["title"],
                    "severity": entry["severity"],
                    "category": entry["category"],
                }
            )
        return index


class UpgradePathsResource(_KnowledgeBaseResource):
    path = "upgrade-paths"
    title = "Upgrade paths index"
    summary = "Every supported version transition with its step sequence."

    def _payload(self) -> Any:
        paths = []
        for identifier in self.knowledge_base.list_upgrade_path_ids():
            upgrade_path = self.knowledge_base.find_upgrade_path(identifier).value
            paths.append(
                {
                    "identifier": identifier,
                    "from_version": upgrade_path.get("from", "unknown"),
                    "to_version": upgrade_path.get("to", "unknown"),
                    "steps": upgrade_path.get("sequence", []),
                    "difficulty": upgrade_path.get("difficulty", "medium"),
                }
            )
        return {"total": len(paths), "paths": paths}
