"""
Shared pytest fixtures for all tests.
"""

import pytest
from pathlib import Path
from typing import Any

from upgrade_lens.application.tools.base_tool import BaseTool
from upgrade_lens.application.tools.tool_registry import ToolRegistry
from upgrade_lens.infrastructure.cache.memory_cache import BoundedCache
from upgrade_lens.infrastructure.config.settings import Settings
from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)
from upgrade_lens.infrastructure.mcp.dispatcher import McpDispatcher
from upgrade_lens.infrastructure.mcp.server import McpServer, build_server
from upgrade_lens.infrastructure.scanner.filesystem_scanner import FilesystemScanner
from upgrade_lens.infrastructure.scanner.project_context import ProjectContext


# ============================================================================
# Test Doubles
# ============================================================================


class FakeClock:
    """Manually advanced clock for TTL, deadline and heartbeat tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EchoTool(BaseTool):
    """Returns its payload unchanged inside a success envelope."""

    tool_name = "echo"
    tool_description = "Echo the payload back"

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._success({"echo": payload})


class FailingTool(BaseTool):
    """Raises on every call."""

    tool_name = "explode"
    tool_description = "Always raises"

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("tool blew up")


# ============================================================================
# Clock Fixtures
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Project Fixtures
# ============================================================================


@pytest.fixture
def php_project(tmp_path: Path) -> Path:
    """A small Laravel-like project tree."""
    files = {
        "index.php": "<?php\necho 'hi';\n",
        "app/Jobs/SendReport.php": (
            "<?php\nclass SendReport\n{\n"
            "    public function handle()\n    {\n"
            "        dispatchNow(new BuildReport());\n    }\n}\n"
        ),
        "app/Mail/Welcome.php": (
            "<?php\nclass Welcome\n{\n"
            "    public function build()\n    {\n"
            "        return $this->withSwiftMessage(function ($m) {});\n    }\n}\n"
        ),
        "config/app.php": "<?php\nreturn [];\n",
        "resources/views/home.blade.php": "<h1>Home</h1>\n",
        "vendor/laravel/framework/Bus.php": "<?php\ndispatchNow($job);\n",
        "node_modules/pkg/index.js": "module.exports = {};\n",
        "README.md": "# Demo\n",
    }
    for relative, contents in files.items():
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    return tmp_path


@pytest.fixture
def project_context(php_project: Path) -> ProjectContext:
    return ProjectContext(php_project)


@pytest.fixture
def scanner(project_context: ProjectContext) -> FilesystemScanner:
    return FilesystemScanner(project_context)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def knowledge_base() -> KnowledgeBaseService:
    """Knowledge base backed by the bundled sample documents."""
    return KnowledgeBaseService.create_default()


@pytest.fixture
def cache(fake_clock: FakeClock) -> BoundedCache:
    return BoundedCache(default_ttl=60, max_cache_size=2, clock=fake_clock)


@pytest.fixture
def settings(php_project: Path) -> Settings:
    return Settings(project_root=str(php_project), tool_timeout_seconds=60)


@pytest.fixture
def echo_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(EchoTool())
    registry.register(FailingTool())
    return registry


@pytest.fixture
def echo_dispatcher(echo_registry: ToolRegistry) -> McpDispatcher:
    """Dispatcher over a server holding only the echo and failing tools."""
    return McpDispatcher(McpServer(echo_registry, server_version="9.9.9"))


@pytest.fixture
def server(settings: Settings, knowledge_base: KnowledgeBaseService) -> McpServer:
    return build_server(settings, knowledge_base=knowledge_base)


@pytest.fixture
def dispatcher(server: McpServer) -> McpDispatcher:
    return McpDispatcher(server)


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as an end-to-end test"
    )
