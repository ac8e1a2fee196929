from .domain_exceptions import (
    DomainError,
    CacheError,
    InvalidCacheKeyError,
    CacheValueTooLargeError,
    ToolError,
    ToolNotRegisteredError,
    ToolTimeoutError,
    InvalidProjectRootError,
    InvalidProtocolVersionError,
    InvalidParamsError,
    ServerNotInitializedError,
    KnowledgeBaseError,
    ResourceNotFoundError,
)

__all__ = [
    "DomainError",
    "CacheError",
    "InvalidCacheKeyError",
    "CacheValueTooLargeError",
    "ToolError",
    "ToolNotRegisteredError",
    "ToolTimeoutError",
    "InvalidProjectRootError",
    "InvalidProtocolVersionError",
    "InvalidParamsError",
    "ServerNotInitializedError",
    "KnowledgeBaseError",
    "ResourceNotFoundError",
]
