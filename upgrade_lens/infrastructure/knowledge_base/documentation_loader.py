import json
import logging
from pathlib import Path
from typing import Any, Optional

from upgrade_lens.domain.exceptions.domain_exceptions import KnowledgeBaseError

logger = logging.getLogger(__name__)


UPGRADE_PATHS_FILE = "upgrade-paths/upgrade-paths.json"


class DocumentationLoader:
    """Lazily loads knowledge base JSON documents from a directory.

    Layout::

        index.json
        patterns/*.json
        upgrade-paths/upgrade-paths.json   (optional)
        <breaking change documents referenced from index.json>
    """

    def __init__(self, base_path: str | Path):
        resolved = Path(base_path).expanduser().resolve()
        if not resolved.is_dir():
            raise KnowledgeBaseError(
                f"Knowledge base directory is invalid or not accessible: {base_path}"
            )

        self.base_path = resolved
        self._index: Optional[dict[str, Any]] = None
        self._breaking_change_documents: Optional[dict[str, dict[str, Any]]] = None
        self._pattern_documents: Optional[dict[str, dict[str, Any]]] = None
        self._upgrade_paths: Optional[dict[str, dict[str, Any]]] = None

        logger.debug("DocumentationLoader initialized: base_path=%s", self.base_path)

    def load_index(self) -> dict[str, Any]:
        if self._index is None:
            self._index = self._parse_json(self._resolve("index.json"))
        return self._index

    def versions_covered(self) -> list[str]:
        return list(self.load_index().get("laravel_versions_covered", []))

    def load_breaking_change_documents(self) -> dict[str, dict[str, Any]]:
        if self._breaking_change_documents is not None:
            return self._breaking_change_documents

        files = self.load_index().get("breaking_changes_files", {})
        documents = {}
        for slug, metadata in files.items():
            if not isinstance(metadata, dict) or "file" not in metadata:
                continue
            documents[str(slug)] = self._parse_json(self._resolve(str(metadata["file"])))

        self._breaking_change_documents = documents
        return documents

    def load_breaking_change_entries(self) -> dict[str, dict[str, Any]]:
        """Flattened changes keyed by ``<slug>::<change id>``."""
        entries = {}
        for slug, document in self.load_breaking_change_documents().items():
            for change in document.get("breaking_changes", []):
                if not isinstance(change, dict) or "id" not in change:
                    continue

                change_id = str(change["id"])
                entries[f"{slug}::{change_id}"] = {
                    "id": change_id,
                    "slug": slug,
                    "title": change.get("title", change_id),
                    "version": document.get("version"),
                    "severity": change.get("severity"),
                    "category": change.get("category"),
                    "description": change.get("description", ""),
                    "data": change,
                }

        return dict(sorted(entries.items()))

    def load_pattern_documents(self) -> dict[str, dict[str, Any]]:
        if self._pattern_documents is not None:
            return self._pattern_documents

        pattern_dir = self._resolve("patterns")
        documents = {}
        for file in sorted(pattern_dir.glob("*.json")):
            decoded = self._parse_json(file)
            pattern_id = decoded.get("pattern_id")
            if not isinstance(pattern_id, str) or not pattern_id:
                pattern_id = file.stem
            documents[pattern_id] = decoded

        self._pattern_documents = dict(sorted(documents.items()))
        return self._pattern_documents

    def load_upgrade_paths(self) -> dict[str, dict[str, Any]]:
        """Upgrade path documents keyed by identifier, e.g. ``10-to-11``.

        A knowledge base without an upgrade paths file has no paths.
        """
        if self._upgrade_paths is not None:
            return self._upgrade_paths

        if not (self.base_path / UPGRADE_PATHS_FILE).is_file():
            logger.debug("No upgrade paths file under %s", self.base_path)
            self._upgrade_paths = {}
            return self._upgrade_paths

        paths = self._parse_json(self._resolve(UPGRADE_PATHS_FILE)).get("upgrade_paths", {})
        if not isinstance(paths, dict):
            raise KnowledgeBaseError(
                f"Unable to parse knowledge base file {UPGRADE_PATHS_FILE}: "
                "upgrade_paths must be an object"
            )

        self._upgrade_paths = {
            str(identifier): path for identifier, path in paths.items() if isinstance(path, dict)
        }
        return self._upgrade_paths

    def _resolve(self, relative_path: str) -> Path:
        relative = relative_path.replace("\\", "/").lstrip("/")

        if ".." in relative.split("/"):
            logger.warning(
                "Path traversal attempt detected: relative_path=%s base_path=%s",
                relative_path,
                self.base_path,
            )
            raise KnowledgeBaseError(f"Knowledge base file not found: {relative_path}")

        candidate = (self.base_path / relative).resolve()
        if candidate != self.base_path and self.base_path not in candidate.parents:
            logger.warning(
                "Path escape attempt detected: candidate=%s base_path=%s",
                candidate,
                self.base_path,
            )
            raise KnowledgeBaseError(f"Knowledge base file not found: {relative_path}")

        if not candidate.exists():
            raise KnowledgeBaseError(f"Knowledge base file not found: {candidate}")

        return candidate

    @staticmethod
    def _parse_json(path: Path) -> dict[str, Any]:
        try:
            decoded = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise KnowledgeBaseError(
                f"Unable to parse knowledge base file {path}: {e}"
            ) from e

        if not isinstance(decoded, dict):
            raise KnowledgeBaseError(
                f"Unable to parse knowledge base file {path}: expected a JSON object"
            )
        return decoded
