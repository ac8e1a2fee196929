class DomainError(Exception):
    """Base exception for all domain-level errors."""

    pass


class CacheError(DomainError):
    """Base exception for cache misuse."""

    pass


class InvalidCacheKeyError(CacheError):
    """Raised when a cache key is empty, too long or has forbidden characters."""

    pass


class CacheValueTooLargeError(CacheError):
    """Raised when a serialized cache value exceeds the per-value size limit."""

    pass


class ToolError(DomainError):
    """Base exception for tool invocation failures."""

    pass


class ToolNotRegisteredError(ToolError):
    """Raised when invoking a tool name that the registry does not know."""

    pass


class ToolTimeoutError(ToolError):
    """Raised at a deadline checkpoint once a tool has run past its allowance."""

    pass


class InvalidProjectRootError(DomainError):
    """Raised when a project root does not exist or is not a directory."""

    pass


class InvalidProtocolVersionError(DomainError):
    """Raised when a requested protocol version is not in YYYY-MM-DD form."""

    pass


class InvalidParamsError(DomainError):
    """Raised when protocol method parameters have the wrong shape."""

    pass


class ServerNotInitializedError(DomainError):
    """Raised when a session method is called before initialize."""

    pass


class KnowledgeBaseError(DomainError):
    """Raised when knowledge base files are missing, unreadable or malformed."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when resources/read names a URI no provider serves."""

    pass
