from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class InitializeParams(BaseModel):
    """Parameters accepted by initialize."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    protocol_version: Optional[Any] = Field(default=None, alias="protocolVersion")


class ServerInfo(BaseModel):
    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of a successful initialize handshake."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(serialization_alias="protocolVersion")
    server_info: ServerInfo = Field(serialization_alias="serverInfo")
    capabilities: dict[str, Any]
    instructions: str


class ToolCallParams(BaseModel):
    """Parameters accepted by tools/call."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResult(BaseModel):
    """Protocol-level wrapping of a tool result envelope."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[dict[str, Any]]
    is_error: bool = Field(default=False, serialization_alias="isError")


class ResourceReadParams(BaseModel):
    """Parameters accepted by resources/read."""

    model_config = ConfigDict(extra="allow")

    uri: StrictStr
