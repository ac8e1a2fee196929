"""
JSON-RPC 2.0 dispatcher for the MCP method table.

One dispatcher serves one session: it owns the ``initialized`` flag and
routes each request to the server facade. Every request carrying an ``id``
gets exactly one response; notifications never do.
"""

import json
import logging
from typing import Any, Callable, Optional

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    TextContent,
)
from pydantic import ValidationError

from upgrade_lens.application.dtos.protocol_dtos import (
    InitializeParams,
    InitializeResult,
    ResourceReadParams,
    ServerInfo,
    ToolCallParams,
    ToolCallResult,
)
from upgrade_lens.domain.exceptions.domain_exceptions import (
    DomainError,
    InvalidParamsError,
    ResourceNotFoundError,
    ServerNotInitializedError,
)
from upgrade_lens.domain.value_objects.protocol_version import ProtocolVersion
from upgrade_lens.infrastructure.mcp.server import McpServer

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

# Notifications a client may send; all are accepted without side effects.
KNOWN_NOTIFICATIONS = frozenset(
    {"notifications/initialized", "notifications/cancelled", "ping", "tools/listChanged"}
)


class McpDispatcher:
    """Decodes raw messages, dispatches methods and encodes responses."""

    def __init__(self, server: McpServer):
        self.server = server
        self.initialized = False
        self._handlers: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
        }

    def handle(self, raw: str) -> Optional[str]:
        """Handle one raw message (object or batch array).

        Returns the encoded reply, or None when nothing should be written.
        """
        try:
            decoded = json.loads(raw)
        except ValueError as e:
            return self._encode(self._error_response(None, PARSE_ERROR, f"Parse error: {e}"))

        if isinstance(decoded, list):
            responses = [
                response
                for response in (self.handle_message(message) for message in decoded)
                if response is not None
            ]
            return self._encode(responses) if responses else None

        response = self.handle_message(decoded)
        return None if response is None else self._encode(response)

    def handle_message(self, message: Any) -> Optional[dict[str, Any]]:
        if not isinstance(message, dict):
            return self._error_response(None, INVALID_REQUEST, "Invalid Request")

        request_id = message.get("id")

        if message.get("jsonrpc") != JSONRPC_VERSION:
            return self._error_response(request_id, INVALID_REQUEST, "Invalid Request")

        method = message.get("method")
        if not isinstance(method, str):
            return self._error_response(request_id, INVALID_REQUEST, "Invalid Request")

        params = message.get("params")
        if params is None:
            params = {}

        if "id" not in message:
            self._handle_notification(method)
            return None

        handler = self._handlers.get(method)
        if handler is None:
            return self._error_response(request_id, METHOD_NOT_FOUND, "Method not found")

        try:
            if not isinstance(params, dict):
                raise InvalidParamsError("Parameters must be an object.")
            result = handler(params)
        except DomainError as e:
            logger.warning("Request failed: method=%s error=%s", method, e)
            return self._error_response(request_id, INTERNAL_ERROR, str(e))
        except Exception as e:
            logger.exception("Unexpected error handling method=%s", method)
            return self._error_response(request_id, INTERNAL_ERROR, str(e))

        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

    def _handle_notification(self, method: str) -> None:
        if method not in KNOWN_NOTIFICATIONS:
            logger.debug("Ignoring unknown notification: %s", method)

    def _ensure_initialized(self) -> None:
        if not self.initialized:
            raise ServerNotInitializedError(
                "Server has not been initialized. Call initialize first."
            )

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = InitializeParams.model_validate(params).protocol_version

        if requested is not None:
            protocol_version = str(ProtocolVersion(requested))
        else:
            protocol_version = self.server.supported_protocol_versions[0]

        self.initialized = True
        logger.info("Session initialized: protocol_version=%s", protocol_version)

        return InitializeResult(
            protocol_version=protocol_version,
            server_info=ServerInfo(name=self.server.name, version=self.server.version),
            capabilities=self.server.capabilities,
            instructions=self.server.instructions,
        ).model_dump(by_alias=True)

    def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"status": "ok"}

    def _list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        self._ensure_initialized()
        return {"tools": self.server.describe_tools()}

    def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        self._ensure_initialized()

        if params.get("arguments", {}) is None:
            params = {k: v for k, v in params.items() if k != "arguments"}

        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as e:
            field = e.errors()[0]["loc"][0] if e.errors()[0]["loc"] else "name"
            if field == "arguments":
                raise InvalidParamsError('Parameter "arguments" must be an object.') from e
            raise InvalidParamsError('Parameter "name" is required.') from e

        envelope = self.server.call_tool(call.name, call.arguments)

        content = [
            TextContent(type="text", text=json.dumps(envelope, indent=2)).model_dump(
                by_alias=True, exclude_none=True
            )
        ]
        data = envelope.get("data")
        if isinstance(data, dict) and isinstance(data.get("stream"), list):
            content.extend(data["stream"])

        return ToolCallResult(
            content=content, is_error=envelope.get("ok") is False
        ).model_dump(by_alias=True)

    def _list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        self._ensure_initialized()
        return {"resources": self.server.describe_resources()}

    def _read_resource(self, params: dict[str, Any]) -> dict[str, Any]:
        self._ensure_initialized()

        try:
            uri = ResourceReadParams.model_validate(params).uri
        except ValidationError as e:
            raise InvalidParamsError('Parameter "uri" is required.') from e

        lookup = self.server.read_resource(uri)
        if not lookup.is_found:
            raise ResourceNotFoundError(lookup.reason)

        return {"contents": [lookup.value]}

    def _list_prompts(self, params: dict[str, Any]) -> dict[str, Any]:
        self._ensure_initialized()
        return {"prompts": self.server.describe_prompts()}

    @staticmethod
    def _error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "error": {"code": code, "message": message},
        }

    def _encode(self, payload: Any) -> str:
        try:
            return json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.exception("Failed to encode response")
            request_id = payload.get("id") if isinstance(payload, dict) else None
            return json.dumps(
                self._error_response(request_id, INTERNAL_ERROR, f"Unable to encode response: {e}")
            )
