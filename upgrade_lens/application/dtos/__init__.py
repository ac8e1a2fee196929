from .protocol_dtos import (
    InitializeParams,
    InitializeResult,
    ResourceReadParams,
    ServerInfo,
    ToolCallParams,
    ToolCallResult,
)

__all__ = [
    "InitializeParams",
    "InitializeResult",
    "ResourceReadParams",
    "ServerInfo",
    "ToolCallParams",
    "ToolCallResult",
]
