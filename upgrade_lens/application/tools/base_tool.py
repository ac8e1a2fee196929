import time
from typing import Any, Optional

from upgrade_lens.application.interfaces.i_tool import ITool


class BaseTool(ITool):
    """Common envelope construction for tools.

    Subclasses set ``tool_name`` and ``tool_description`` and implement
    ``execute``; ``_success`` and ``_error`` build the result envelope.
    """

    schema_version = "1.0.0"
    tool_name: str = ""
    tool_description: str = ""

    @property
    def name(self) -> str:
        return self.tool_name

    @property
    def description(self) -> str:
        return self.tool_description

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    @property
    def annotations(self) -> dict[str, Any]:
        return {}

    def _success(
        self,
        data: dict[str, Any],
        warnings: Optional[list[str]] = None,
        started_at: Optional[float] = None,
    ) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "ok": True,
            "data": data,
            "warnings": list(warnings or []),
            "timings": {"ms": self._elapsed_ms(started_at)},
        }

    def _error(
        self,
        message: str,
        warnings: Optional[list[str]] = None,
        started_at: Optional[float] = None,
        code: Optional[str] = None,
    ) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "ok": False,
            "error": {"message": message, "code": code},
            "warnings": list(warnings or []),
            "timings": {"ms": self._elapsed_ms(started_at)},
        }

    @staticmethod
    def _elapsed_ms(started_at: Optional[float]) -> float:
        if started_at is None:
            return 0.0
        return round((time.perf_counter() - started_at) * 1000, 3)
