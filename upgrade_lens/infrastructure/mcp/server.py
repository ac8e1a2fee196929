"""
MCP server facade.

Holds the tool registry and the read-only resource and prompt providers that
the protocol dispatcher routes to, plus the server identity reported by
initialize.

Usage:
    server = build_server(Settings())
    dispatcher = McpDispatcher(server)
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any, Optional, Sequence

from upgrade_lens.application.interfaces.i_descriptor_provider import (
    IPromptProvider,
    IResourceProvider,
)
from upgrade_lens.application.tools.tool_registry import ToolRegistry
from upgrade_lens.domain.entities.lookup_result import LookupResult
from upgrade_lens.infrastructure.cache.memory_cache import BoundedCache
from upgrade_lens.infrastructure.config.settings import Settings
from upgrade_lens.infrastructure.knowledge_base.knowledge_base_service import (
    KnowledgeBaseService,
)
from upgrade_lens.infrastructure.mcp.prompts import (
    PackageUpgradePrompt,
    PatternScanPrompt,
    UpgradeFoundationPrompt,
)
from upgrade_lens.infrastructure.mcp.resources import (
    BreakingChangesIndexResource,
    KnowledgeBaseSummaryResource,
    PatternsIndexResource,
    UpgradePathsResource,
)
from upgrade_lens.infrastructure.mcp.tools.code_tools import (
    FindUsagePatternsTool,
    ListProjectFilesTool,
)
from upgrade_lens.infrastructure.mcp.tools.documentation_tools import (
    GetBreakingChangeDetailsTool,
    GetUpgradeGuideTool,
    ListDeprecatedFeaturesTool,
    SearchUpgradeDocsTool,
)

SERVER_NAME = "Upgrade Lens"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2024-11-05", "2024-10-07")

INSTRUCTIONS = "\n".join(
    [
        "Upgrade Lens exposes upgrade documentation lookups and project scanners.",
        "",
        "Before starting an upgrade, establish a baseline:",
        "- Run the full test suite and record the results.",
        "- Back up the database and storage assets.",
        "- Note the current git commit and make sure the working tree is clean.",
        "",
        "Tool usage discipline:",
        "- Inspect tool schemas with tools/list before invoking anything.",
        "- Prefer the purpose-built scanners over manual grepping.",
        "- Reuse identifiers from earlier results instead of re-running tools.",
        "- Summarise large outputs before replying.",
    ]
)


def _package_version() -> str:
    try:
        return version("upgrade-lens")
    except PackageNotFoundError:
        return "0.1.0-dev"


class McpServer:
    """Tools, resources and prompts served over a single MCP session."""

    def __init__(
        self,
        registry: ToolRegistry,
        resources: Sequence[IResourceProvider] = (),
        prompts: Sequence[IPromptProvider] = (),
        name: str = SERVER_NAME,
        server_version: Optional[str] = None,
        instructions: str = INSTRUCTIONS,
    ):
        self.registry = registry
        self.resources = list(resources)
        self.prompts = list(prompts)
        self.name = name
        self.version = server_version or _package_version()
        self.instructions = instructions

    @property
    def supported_protocol_versions(self) -> tuple[str, ...]:
        return SUPPORTED_PROTOCOL_VERSIONS

    @property
    def capabilities(self) -> dict[str, Any]:
        return {
            "tools": {"listChanged": False},
            "resources": {"listChanged": False},
            "prompts": {"listChanged": False},
        }

    def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        return self.registry.invoke(name, arguments)

    def describe_tools(self) -> list[dict[str, Any]]:
        descriptors = []
        for name in self.registry.list():
            tool = self.registry.get(name)
            descriptors.append(
                {
                    "name": tool.name,
                    "description": tool.description,
                    "inputSchema": tool.input_schema,
                    "annotations": tool.annotations or {},
                }
            )
        return descriptors

    def describe_resources(self) -> list[dict[str, Any]]:
        return [
            p.describe().model_dump(mode="json", by_alias=True, exclude_none=True)
            for p in self.resources
        ]

    def describe_prompts(self) -> list[dict[str, Any]]:
        return [
            p.describe().model_dump(mode="json", by_alias=True, exclude_none=True)
            for p in self.prompts
        ]

    def read_resource(self, uri: str) -> LookupResult[dict[str, Any]]:
        for provider in self.resources:
            descriptor = provider.describe()
            if str(descriptor.uri) == uri:
                return LookupResult.found(
                    {
                        "uri": uri,
                        "mimeType": descriptor.mimeType or "text/plain",
                        "text": provider.read(),
                    }
                )
        return LookupResult.not_found(f"Resource not found: {uri}")


def build_server(
    settings: Settings, knowledge_base: Optional[KnowledgeBaseService] = None
) -> McpServer:
    """Assemble a server with every built-in tool, resource and prompt."""
    if knowledge_base is None:
        knowledge_base = KnowledgeBaseService.create_default(
            settings.knowledge_base_path,
            cache=BoundedCache(
                default_ttl=settings.cache_ttl_seconds,
                max_cache_size=settings.cache_max_entries,
                max_value_size=settings.cache_max_value_size,
            ),
        )

    registry = ToolRegistry(timeout_seconds=settings.tool_timeout_seconds)
    for tool in (
        SearchUpgradeDocsTool(knowledge_base),
        GetBreakingChangeDetailsTool(knowledge_base),
        GetUpgradeGuideTool(knowledge_base),
        ListDeprecatedFeaturesTool(knowledge_base),
        FindUsagePatternsTool(knowledge_base, settings.project_root, settings.exclude_paths),
        ListProjectFilesTool(knowledge_base, settings.project_root, settings.exclude_paths),
    ):
        registry.register(tool)

    return McpServer(
        registry,
        resources=[
            KnowledgeBaseSummaryResource(knowledge_base),
            PatternsIndexResource(knowledge_base),
            BreakingChangesIndexResource(knowledge_base),
            UpgradePathsResource(knowledge_base),
        ],
        prompts=[UpgradeFoundationPrompt(), PatternScanPrompt(), PackageUpgradePrompt()],
    )
