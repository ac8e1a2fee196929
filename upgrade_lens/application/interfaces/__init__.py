from .i_cache_service import ICacheService
from .i_tool import ITool
from .i_descriptor_provider import IResourceProvider, IPromptProvider
from .i_project_context import IProjectContext

__all__ = [
    "ICacheService",
    "ITool",
    "IResourceProvider",
    "IPromptProvider",
    "IProjectContext",
]
