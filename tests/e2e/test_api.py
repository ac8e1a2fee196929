"""
End-to-end tests for the HTTP and WebSocket surfaces.

These tests drive the FastAPI application through its TestClient.
"""

import json
import threading
from typing import Any

import pytest
from fastapi.testclient import TestClient

from upgrade_lens import __version__
from upgrade_lens.application.tools.base_tool import BaseTool
from upgrade_lens.application.tools.tool_registry import ToolRegistry
from upgrade_lens.infrastructure.mcp.server import McpServer
from upgrade_lens.presentation.main import create_app


class BlockingTool(BaseTool):
    """Holds its worker thread until released."""

    tool_name = "block"
    tool_description = "Wait for release"

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.finished = threading.Event()

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.started.set()
        released = self.release.wait(timeout=5)
        self.finished.set()
        return self._success({"released": released})


@pytest.fixture
def client(settings):
    """Create test client."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def rpc(method, params=None, id=1):
    message = {"jsonrpc": "2.0", "id": id, "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


@pytest.mark.e2e
class TestHealthEndpoints:
    """Tests for health and root endpoints."""

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root_endpoint(self, client):
        """Test root endpoint."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Upgrade Lens"
        assert data["version"] == __version__
        assert data["mcp"] == "/mcp"


@pytest.mark.e2e
class TestMcpWebSocket:
    """Tests for the /mcp WebSocket endpoint."""

    def test_session_round_trip(self, client):
        """Test initialize, tools/list and a tool call over one connection."""
        with client.websocket_connect("/mcp") as websocket:
            websocket.send_text(rpc("initialize", {"protocolVersion": "2024-11-05"}))
            init = json.loads(websocket.receive_text())
            assert init["result"]["protocolVersion"] == "2024-11-05"

            websocket.send_text(rpc("tools/list", id=2))
            tools = json.loads(websocket.receive_text())["result"]["tools"]
            assert "list_project_files" in [t["name"] for t in tools]

            websocket.send_text(
                rpc(
                    "tools/call",
                    {"name": "list_project_files", "arguments": {"patterns": ["*.php"]}},
                    id=3,
                )
            )
            result = json.loads(websocket.receive_text())["result"]
            envelope = json.loads(result["content"][0]["text"])
            assert envelope["data"]["files"] == ["index.php"]

    def test_notifications_get_no_reply(self, client):
        """Test that a notification frame is followed only by the next reply."""
        with client.websocket_connect("/mcp") as websocket:
            websocket.send_text(json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}))
            websocket.send_text(rpc("ping", id="after"))

            assert json.loads(websocket.receive_text())["id"] == "after"

    def test_each_connection_has_its_own_session(self, client):
        """Test that initialize on one connection does not leak to another."""
        with client.websocket_connect("/mcp") as first:
            first.send_text(rpc("initialize"))
            first.receive_text()

            with client.websocket_connect("/mcp") as second:
                second.send_text(rpc("tools/list"))
                response = json.loads(second.receive_text())

        assert "not been initialized" in response["error"]["message"]

    def test_parse_error_frame(self, client):
        """Test that malformed frames get a parse error reply."""
        with client.websocket_connect("/mcp") as websocket:
            websocket.send_text("{oops")
            response = json.loads(websocket.receive_text())

        assert response["error"]["code"] == -32700

    def test_slow_tool_does_not_stall_other_requests(self, client, monkeypatch):
        """Test that /health answers while a tool call is still running."""
        tool = BlockingTool()
        registry = ToolRegistry()
        registry.register(tool)
        monkeypatch.setattr(
            "upgrade_lens.presentation.websocket.mcp_ws.build_server",
            lambda settings: McpServer(registry, server_version="9.9.9"),
        )

        with client.websocket_connect("/mcp") as websocket:
            websocket.send_text(rpc("initialize"))
            websocket.receive_text()

            websocket.send_text(rpc("tools/call", {"name": "block", "arguments": {}}, id=2))
            assert tool.started.wait(timeout=5)

            health = client.get("/health")
            assert health.status_code == 200
            assert not tool.finished.is_set()

            tool.release.set()
            result = json.loads(websocket.receive_text())["result"]

        assert json.loads(result["content"][0]["text"])["data"] == {"released": True}
