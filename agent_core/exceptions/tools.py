#!/usr/bin/env python3
"""
Tool Exception Definitions for agent-core

All tool-related exceptions inherit from AgentCoreError.
"""

from typing import Optional

from .base import AgentCoreError


class ToolError(AgentCoreError):
    """Base exception for tool-related errors."""

    category = "tool"


class ToolNotFoundError(ToolError):
    """Raised when requested tool is not found in registry."""

    category = "tool_not_found"

    def __init__(self, tool_name: str, available: Optional[list] = None):
        super().__init__(
            f"Tool not found: {tool_name}",
            user_hint=f"The tool '{tool_name}' is not available.",
            details={"available": list(available or [])},
        )
        self.tool_name = tool_name


class ToolValidationError(ToolError):
    """Raised when a tool call fails schema validation."""

    category = "tool_validation"

    def __init__(self, message, tool_name=None, missing_param=None):
        super().__init__(
            f"Tool validation error: {message}",
            user_hint=f"Invalid tool input: {message}",
        )
        self.tool_name = tool_name
        self.missing_param = missing_param
        if missing_param:
            self.details["missing_param"] = missing_param


class ToolExecutionError(ToolError):
    """Raised when tool execution fails."""

    category = "tool_execution"

    def __init__(self, message, tool_name=None, original_error=None, user_hint=None):
        super().__init__(
            f"Tool execution error: {message}",
            original_error=original_error,
            user_hint=user_hint or f"Tool error: {message}",
        )
        self.tool_name = tool_name


class ToolCallParseError(ToolError):
    """
    Raised when model text contains something that looks like a tool call
    but cannot be decoded. Always recovered locally by the parser.
    """

    category = "parse"

    def __init__(self, message, raw_text=None, original_error=None):
        super().__init__(f"Parse error: {message}", original_error=original_error)
        self.raw_text = raw_text
