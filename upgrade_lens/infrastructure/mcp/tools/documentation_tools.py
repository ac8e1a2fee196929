import time
from typing import Any

from upgrade_lens.application.tools.base_tool import BaseTool
from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)

READ_ONLY = {"readOnlyHint": True, "openWorldHint": False}


class SearchUpgradeDocsTool(BaseTool):
    """Keyword search across breaking changes and detection patterns."""

    tool_name = "search_upgrade_docs"
    tool_description = (
        "Search the upgrade knowledge base for relevant breaking changes and patterns."
    )

    def __init__(self, knowledge_base: KnowledgeBaseService):
        self.knowledge_base = knowledge_base

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Keywords to search for",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results (default: 10)",
                    "default": 10,
                },
                "range": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Restrict results to these types (e.g., ['pattern'])",
                },
            },
            "required": ["query"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        query = str(payload.get("query") or "").strip()

        if not query:
            return self._error(
                'Parameter "query" is required.', started_at=started_at, code="invalid_request"
            )

        try:
            limit = max(1, int(payload.get("limit", 10)))
        except (TypeError, ValueError):
            return self._error(
                'Parameter "limit" must be an integer.',
                started_at=started_at,
                code="invalid_request",
            )

        results = self.knowledge_base.search(query, limit * 2)

        allowed_types = payload.get("range")
        if isinstance(allowed_types, list) and allowed_types:
            allowed = {str(t).lower() for t in allowed_types}
            results = [r for r in results if str(r.get("type", "")).lower() in allowed]

        return self._success(
            {"query": query, "limit": limit, "results": results[:limit]},
            started_at=started_at,
        )


class GetBreakingChangeDetailsTool(BaseTool):
    """Full record of one breaking change entry."""

    tool_name = "get_breaking_change_details"
    tool_description = "Fetch the full details of a breaking change by document slug and change id."

    def __init__(self, knowledge_base: KnowledgeBaseService):
        self.knowledge_base = knowledge_base

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "slug": {
                    "type": "string",
                    "description": "Breaking change document slug (e.g., 'laravel-11')",
                },
                "change_id": {
                    "type": "string",
                    "description": "Identifier of the change within the document",
                },
            },
            "required": ["slug", "change_id"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        slug = str(payload.get("slug") or "").strip()
        change_id = str(payload.get("change_id") or "").strip()

        if not slug or not change_id:
            return self._error(
                'Parameters "slug" and "change_id" are required.',
                started_at=started_at,
                code="invalid_request",
            )

        lookup = self.knowledge_base.find_breaking_change(slug, change_id)
        if not lookup.is_found:
            return self._error(lookup.reason, started_at=started_at, code="not_found")

        return self._success({"change": lookup.value}, started_at=started_at)


class GetUpgradeGuideTool(BaseTool):
    """Upgrade path for a version transition, with its pattern documents."""

    tool_name = "get_upgrade_guide"
    tool_description = (
        "Retrieve the upgrade guide, required steps, and related patterns for a "
        "Laravel version transition."
    )

    def __init__(self, knowledge_base: KnowledgeBaseService):
        self.knowledge_base = knowledge_base

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "from": {
                    "type": "string",
                    "description": "Current framework version (e.g., '10.x')",
                },
                "to": {
                    "type": "string",
                    "description": "Target framework version (e.g., '11.x')",
                },
            },
            "required": ["from", "to"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        from_version = str(payload.get("from") or "").strip()
        to_version = str(payload.get("to") or "").strip()

        if not from_version or not to_version:
            return self._error(
                'Parameters "from" and "to" are required.',
                started_at=started_at,
                code="invalid_request",
            )

        resolved = self.knowledge_base.resolve_upgrade_path_id(from_version, to_version)
        if not resolved.is_found:
            return self._error(resolved.reason, started_at=started_at, code="not_found")

        identifier = resolved.value
        path = self.knowledge_base.find_upgrade_path(identifier).value

        warnings: list[str] = []
        required = list(path.get("required_patterns", []))
        optional = list(path.get("optional_patterns", []))

        return self._success(
            {
                "identifier": identifier,
                "from": path.get("from", from_version),
                "to": path.get("to", to_version),
                "difficulty": path.get("difficulty"),
                "estimated_time_minutes": path.get("estimated_time_minutes"),
                "breaking_changes_file": path.get("breaking_changes_file"),
                "required_patterns": {
                    "ids": required,
                    "details": self._pattern_details(required, warnings),
                },
                "optional_patterns": {
                    "ids": optional,
                    "details": self._pattern_details(optional, warnings),
                },
                "sequence": path.get("sequence", []),
            },
            warnings=warnings,
            started_at=started_at,
        )

    def _pattern_details(
        self, pattern_ids: list[Any], warnings: list[str]
    ) -> list[dict[str, Any]]:
        details = []
        for pattern_id in pattern_ids:
            lookup = self.knowledge_base.find_pattern(str(pattern_id))
            if lookup.is_found:
                details.append(lookup.value)
            else:
                warnings.append(lookup.reason)
        return details


class ListDeprecatedFeaturesTool(BaseTool):
    """Deprecations and removals recorded for one framework version."""

    tool_name = "list_deprecated_features"
    tool_description = "List deprecated features and APIs for a given Laravel version."

    DEPRECATION_CATEGORIES = ("deprecation", "feature-removal")

    def __init__(self, knowledge_base: KnowledgeBaseService):
        self.knowledge_base = knowledge_base

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "version": {
                    "type": "string",
                    "description": "Framework version to inspect (e.g., '10.x')",
                },
            },
            "required": ["version"],
        }

    @property
    def annotations(self) -> dict[str, Any]:
        return READ_ONLY

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        version = str(payload.get("version") or "").strip()

        if not version:
            return self._error(
                'Parameter "version" is required.', started_at=started_at, code="invalid_request"
            )

        resolved = self.knowledge_base.resolve_breaking_change_slug(version)
        if not resolved.is_found:
            return self._error(resolved.reason, started_at=started_at, code="not_found")

        document = self.knowledge_base.find_breaking_change_document(resolved.value).value
        deprecated = [
            {
                "id": change.get("id"),
                "title": change.get("title"),
                "description": change.get("description"),
                "severity": change.get("severity"),
                "category": change.get("category"),
                "references": change.get("references", []),
            }
            for change in document.get("breaking_changes", [])
            if isinstance(change, dict) and self._is_deprecation(change)
        ]

        warnings = []
        if not deprecated:
            warnings.append(f"No deprecated features recorded for Laravel {version}.")

        return self._success(
            {
                "version": document.get("version", version),
                "from_version": document.get("from_version"),
                "deprecated": deprecated,
            },
            warnings=warnings,
            started_at=started_at,
        )

    def _is_deprecation(self, change: dict[str, Any]) -> bool:
        text = f"{change.get('title', '')} {change.get('description', '')}".lower()
        category = str(change.get("category") or "").lower()
        return "deprecat" in text or category in self.DEPRECATION_CATEGORIES
