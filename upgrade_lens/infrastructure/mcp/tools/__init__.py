from .code_tools import FindUsagePatternsTool, ListProjectFilesTool
from .documentation_tools import (
    GetBreakingChangeDetailsTool,
    GetUpgradeGuideTool,
    ListDeprecatedFeaturesTool,
    SearchUpgradeDocsTool,
)

__all__ = [
    "FindUsagePatternsTool",
    "ListProjectFilesTool",
    "GetBreakingChangeDetailsTool",
    "GetUpgradeGuideTool",
    "ListDeprecatedFeaturesTool",
    "SearchUpgradeDocsTool",
]
