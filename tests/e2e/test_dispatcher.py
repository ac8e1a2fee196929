"""
End-to-end tests for the JSON-RPC dispatcher.

Messages go in as raw JSON text and responses are decoded from the text the
dispatcher returns, exactly as a transport would see them.
"""

import json

import pytest

from mcp.types import INTERNAL_ERROR, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR

from upgrade_lens.application.tools.base_tool import BaseTool
from upgrade_lens.infrastructure.mcp.dispatcher import McpDispatcher
from upgrade_lens.infrastructure.mcp.server import McpServer


class StreamingTool(BaseTool):
    """Returns partial output chunks alongside its envelope."""

    tool_name = "stream"
    chunks = [{"type": "text", "text": "part 1"}, {"type": "text", "text": "part 2"}]

    def execute(self, payload):
        return self._success({"stream": self.chunks})


def request(method, params=None, id=1):
    message = {"jsonrpc": "2.0", "id": id, "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


def notification(method):
    return json.dumps({"jsonrpc": "2.0", "method": method})


def call(dispatcher, method, params=None, id=1):
    return json.loads(dispatcher.handle(request(method, params, id)))


def initialize(dispatcher, version=None):
    params = {"protocolVersion": version} if version else {}
    return call(dispatcher, "initialize", params, id="init")


@pytest.mark.e2e
class TestProtocolErrors:
    """Tests for JSON-RPC framing errors."""

    def test_parse_error(self, echo_dispatcher):
        response = json.loads(echo_dispatcher.handle("{not json"))

        assert response["id"] is None
        assert response["error"]["code"] == PARSE_ERROR
        assert response["error"]["message"].startswith("Parse error:")

    @pytest.mark.parametrize(
        "message",
        [
            {"id": 1, "method": "ping"},
            {"jsonrpc": "1.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "id": 1, "method": 42},
            {"jsonrpc": "2.0", "id": 1},
        ],
    )
    def test_invalid_request(self, echo_dispatcher, message):
        response = json.loads(echo_dispatcher.handle(json.dumps(message)))

        assert response["id"] == 1
        assert response["error"] == {"code": INVALID_REQUEST, "message": "Invalid Request"}

    def test_non_object_request(self, echo_dispatcher):
        response = json.loads(echo_dispatcher.handle("42"))

        assert response["id"] is None
        assert response["error"]["code"] == INVALID_REQUEST

    def test_method_not_found(self, echo_dispatcher):
        response = call(echo_dispatcher, "tools/unknown")

        assert response["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}

    @pytest.mark.parametrize("request_id", [7, "abc", 0, None])
    def test_id_echoed_with_type(self, echo_dispatcher, request_id):
        response = call(echo_dispatcher, "ping", id=request_id)

        assert response["id"] == request_id
        assert type(response["id"]) is type(request_id)
        assert response["result"] == {"status": "ok"}

    def test_params_must_be_object(self, echo_dispatcher):
        initialize(echo_dispatcher)
        response = call(echo_dispatcher, "tools/call", params=["echo"])

        assert response["error"]["code"] == INTERNAL_ERROR


@pytest.mark.e2e
class TestNotificationsAndBatches:
    """Tests for notifications and batch requests."""

    @pytest.mark.parametrize(
        "method",
        ["notifications/initialized", "ping", "notifications/cancelled", "something/else"],
    )
    def test_notification_produces_no_output(self, echo_dispatcher, method):
        assert echo_dispatcher.handle(notification(method)) is None

    def test_notification_only_batch_produces_no_output(self, echo_dispatcher):
        batch = "[" + notification("notifications/initialized") + "," + notification("ping") + "]"

        assert echo_dispatcher.handle(batch) is None

    def test_empty_batch_produces_no_output(self, echo_dispatcher):
        assert echo_dispatcher.handle("[]") is None

    def test_batch_preserves_order_and_drops_notifications(self, echo_dispatcher):
        batch = json.dumps(
            [
                {"jsonrpc": "2.0", "id": "a", "method": "ping"},
                {"jsonrpc": "2.0", "method": "notifications/initialized"},
                {"jsonrpc": "2.0", "id": "b", "method": "missing"},
                7,
            ]
        )

        responses = json.loads(echo_dispatcher.handle(batch))

        assert [r["id"] for r in responses] == ["a", "b", None]
        assert responses[0]["result"] == {"status": "ok"}
        assert responses[1]["error"]["code"] == METHOD_NOT_FOUND
        assert responses[2]["error"]["code"] == INVALID_REQUEST


@pytest.mark.e2e
class TestInitialization:
    """Tests for the initialize handshake and the session state machine."""

    def test_tools_list_before_initialize_fails(self, echo_dispatcher):
        response = call(echo_dispatcher, "tools/list")

        assert response["error"]["code"] == INTERNAL_ERROR
        assert "not been initialized" in response["error"]["message"]

    @pytest.mark.parametrize(
        "method",
        ["tools/call", "resources/list", "resources/read", "prompts/list"],
    )
    def test_other_methods_require_initialize(self, echo_dispatcher, method):
        response = call(echo_dispatcher, method, {"name": "echo", "uri": "x"})

        assert "not been initialized" in response["error"]["message"]

    def test_ping_before_initialize(self, echo_dispatcher):
        assert call(echo_dispatcher, "ping")["result"] == {"status": "ok"}

    def test_initialize_defaults_to_latest_version(self, echo_dispatcher):
        result = initialize(echo_dispatcher)["result"]

        assert result["protocolVersion"] == "2025-06-18"
        assert result["serverInfo"] == {"name": "Upgrade Lens", "version": "9.9.9"}
        assert result["capabilities"] == {
            "tools": {"listChanged": False},
            "resources": {"listChanged": False},
            "prompts": {"listChanged": False},
        }
        assert result["instructions"]

    def test_initialize_echoes_requested_version(self, echo_dispatcher):
        result = initialize(echo_dispatcher, "2024-11-05")["result"]

        assert result["protocolVersion"] == "2024-11-05"

    def test_initialize_rejects_malformed_version(self, echo_dispatcher):
        response = initialize(echo_dispatcher, "June 2025")

        assert response["id"] == "init"
        assert response["error"]["code"] == INTERNAL_ERROR
        assert response["error"]["message"] == (
            "Invalid protocol version format. Expected YYYY-MM-DD format."
        )
        assert "not been initialized" in call(echo_dispatcher, "tools/list")["error"]["message"]

    def test_sessions_are_independent(self, echo_registry):
        server = McpServer(echo_registry)
        first, second = McpDispatcher(server), McpDispatcher(server)
        initialize(first)

        assert "result" in call(first, "tools/list")
        assert "error" in call(second, "tools/list")


@pytest.mark.e2e
class TestToolCalls:
    """Tests for tools/list and tools/call."""

    def test_tools_list(self, echo_dispatcher):
        initialize(echo_dispatcher)
        tools = call(echo_dispatcher, "tools/list")["result"]["tools"]

        assert [t["name"] for t in tools] == ["echo", "explode"]
        assert tools[0]["inputSchema"] == {"type": "object", "properties": {}}
        assert tools[0]["annotations"] == {}

    def test_echo_round_trip(self, echo_dispatcher):
        initialize(echo_dispatcher)
        result = call(
            echo_dispatcher, "tools/call", {"name": "echo", "arguments": {"text": "hi"}}
        )["result"]

        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        envelope = json.loads(result["content"][0]["text"])
        assert envelope["ok"] is True
        assert envelope["data"] == {"echo": {"text": "hi"}}

    def test_null_arguments_default_to_empty(self, echo_dispatcher):
        initialize(echo_dispatcher)
        result = call(echo_dispatcher, "tools/call", {"name": "echo", "arguments": None})["result"]

        assert json.loads(result["content"][0]["text"])["data"] == {"echo": {}}

    def test_unregistered_tool(self, echo_dispatcher):
        initialize(echo_dispatcher)
        response = call(echo_dispatcher, "tools/call", {"name": "nope"}, id=5)

        assert response["id"] == 5
        assert response["error"]["code"] == INTERNAL_ERROR
        assert "not registered" in response["error"]["message"]

    def test_missing_name(self, echo_dispatcher):
        initialize(echo_dispatcher)
        response = call(echo_dispatcher, "tools/call", {"arguments": {}})

        assert response["error"]["message"] == 'Parameter "name" is required.'

    def test_non_object_arguments(self, echo_dispatcher):
        initialize(echo_dispatcher)
        response = call(echo_dispatcher, "tools/call", {"name": "echo", "arguments": "x"})

        assert response["error"]["message"] == 'Parameter "arguments" must be an object.'

    def test_tool_exception_becomes_internal_error(self, echo_dispatcher):
        initialize(echo_dispatcher)
        response = call(echo_dispatcher, "tools/call", {"name": "explode"}, id="x")

        assert response["id"] == "x"
        assert response["error"] == {"code": INTERNAL_ERROR, "message": "tool blew up"}

    def test_error_envelope_sets_is_error(self, dispatcher):
        initialize(dispatcher)
        result = call(
            dispatcher,
            "tools/call",
            {"name": "get_breaking_change_details", "arguments": {"slug": "x", "change_id": "y"}},
        )["result"]

        assert result["isError"] is True

    def test_stream_chunks_appended(self, echo_registry, echo_dispatcher):
        echo_registry.register(StreamingTool())
        initialize(echo_dispatcher)
        result = call(echo_dispatcher, "tools/call", {"name": "stream"})["result"]

        assert len(result["content"]) == 3
        assert result["content"][1:] == StreamingTool.chunks
        assert json.loads(result["content"][0]["text"])["data"]["stream"] == StreamingTool.chunks


@pytest.mark.e2e
class TestBuiltInServer:
    """Tests against the fully assembled server."""

    def test_registered_tools(self, dispatcher):
        initialize(dispatcher)
        names = [t["name"] for t in call(dispatcher, "tools/list")["result"]["tools"]]

        assert names == [
            "search_upgrade_docs",
            "get_breaking_change_details",
            "get_upgrade_guide",
            "list_deprecated_features",
            "find_usage_patterns",
            "list_project_files",
        ]

    def test_find_usage_patterns_over_protocol(self, dispatcher):
        initialize(dispatcher)
        result = call(
            dispatcher,
            "tools/call",
            {"name": "find_usage_patterns", "arguments": {"pattern": "swift-message"}},
        )["result"]
        envelope = json.loads(result["content"][0]["text"])

        assert result["isError"] is False
        assert envelope["data"]["results"][0]["matches"][0]["file"] == "app/Mail/Welcome.php"

    def test_resources_list_and_read(self, dispatcher):
        initialize(dispatcher)
        resources = call(dispatcher, "resources/list")["result"]["resources"]
        uris = [r["uri"] for r in resources]

        assert "upgrade-lens://knowledge-base/summary" in uris

        contents = call(
            dispatcher, "resources/read", {"uri": "upgrade-lens://knowledge-base/summary"}
        )["result"]["contents"]

        assert contents[0]["mimeType"] == "application/json"
        assert json.loads(contents[0]["text"])["knowledge_base_version"] == "2025.1"

    def test_resources_read_unknown(self, dispatcher):
        initialize(dispatcher)
        response = call(dispatcher, "resources/read", {"uri": "upgrade-lens://nope"})

        assert response["error"] == {
            "code": INTERNAL_ERROR,
            "message": "Resource not found: upgrade-lens://nope",
        }

    def test_resources_read_requires_uri(self, dispatcher):
        initialize(dispatcher)
        response = call(dispatcher, "resources/read", {})

        assert response["error"]["message"] == 'Parameter "uri" is required.'

    def test_prompts_list(self, dispatcher):
        initialize(dispatcher)
        prompts = call(dispatcher, "prompts/list")["result"]["prompts"]

        assert [p["name"] for p in prompts] == [
            "upgrade_foundation",
            "pattern_scan",
            "package_upgrade",
        ]
