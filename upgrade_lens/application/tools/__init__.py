from .base_tool import BaseTool
from .deadline import Deadline, check_deadline, current_deadline, execution_deadline
from .tool_registry import ToolRegistry

__all__ = [
    "BaseTool",
    "Deadline",
    "check_deadline",
    "current_deadline",
    "execution_deadline",
    "ToolRegistry",
]
