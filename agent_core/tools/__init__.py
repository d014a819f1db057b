from .base import BaseTool, ParameterSchema, ToolCall, ToolResult, ToolSchema
from .registry import ToolRegistry

__all__ = [
    "BaseTool",
    "ParameterSchema",
    "ToolCall",
    "ToolResult",
    "ToolSchema",
    "ToolRegistry",
]
