import logging
import time
from typing import Any, Optional

from upgrade_lens.application.interfaces.i_tool import ITool
from upgrade_lens.application.tools.deadline import execution_deadline
from upgrade_lens.domain.exceptions.domain_exceptions import ToolNotRegisteredError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Named tools invoked under a cooperative execution deadline."""

    def __init__(self, timeout_seconds: int = 60):
        self._tools: dict[str, ITool] = {}
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> int:
        return self._timeout_seconds

    def register(self, tool: ITool) -> None:
        self._tools[tool.name] = tool
        logger.debug("Tool registered: %s", tool.name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> ITool:
        if name not in self._tools:
            logger.warning("Tool not found: %s", name)
            raise ToolNotRegisteredError(f'Tool "{name}" is not registered.')
        return self._tools[name]

    def list(self) -> list[str]:
        return list(self._tools)

    def set_timeout(self, seconds: int) -> None:
        self._timeout_seconds = seconds
        logger.debug("Tool timeout updated: %ss", seconds)

    def invoke(
        self, name: str, payload: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """Execute a tool and return its envelope unchanged.

        Exceptions raised by the tool are logged and re-raised as-is.
        """
        payload = payload or {}
        tool = self.get(name)
        started_at = time.perf_counter()

        logger.info(
            "Tool execution started: tool=%s payload_size=%d", name, len(payload)
        )

        try:
            with execution_deadline(self._timeout_seconds):
                result = tool.execute(payload)
        except Exception as e:
            logger.error(
                "Tool execution failed: tool=%s duration_ms=%.2f exception=%s message=%s",
                name,
                self._elapsed_ms(started_at),
                type(e).__name__,
                e,
            )
            raise

        logger.info(
            "Tool execution completed: tool=%s duration_ms=%.2f success=%s",
            name,
            self._elapsed_ms(started_at),
            bool(result.get("ok", False)),
        )

        warnings = result.get("warnings")
        if isinstance(warnings, list) and warnings:
            logger.warning("Tool execution warnings: tool=%s warnings=%s", name, warnings)

        return result

    @staticmethod
    def _elapsed_ms(started_at: float) -> float:
        return round((time.perf_counter() - started_at) * 1000, 2)
