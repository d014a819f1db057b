from .parsers import ToolCallParser

__all__ = ["ToolCallParser"]
