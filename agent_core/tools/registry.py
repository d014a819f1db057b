"""
Tool Registry - name-keyed management and dispatch of tools.
"""

import asyncio
import inspect
import logging
import threading
from typing import Dict, Iterable, List, Optional

from agent_core.exceptions import ToolNotFoundError
from .base import BaseTool, ToolCall, ToolResult, ToolSchema

PROMPT_HEADER = "## Available Tools\n\n"
PROMPT_USAGE = (
    "You can use the following tools by responding with a JSON block:\n\n"
    '```tool\n{"tool": "tool_name", "arguments": {"arg": "value"}}\n```\n\n'
)


class ToolRegistry:
    """
    Maps tool names to shared tool instances.

    Registration is last-write-wins. Lookups and mutations hold a plain
    lock for a few dictionary operations only; tool execution happens
    outside the lock.
    """

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None):
        self.logger = logging.getLogger(__name__)
        self._tools: Dict[str, BaseTool] = {}
        self._lock = threading.Lock()
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: BaseTool) -> None:
        """
        Register a tool under its schema name, replacing any previous one.

        Args:
            tool: The tool instance.
        """
        name = tool.schema.name
        with self._lock:
            replaced = name in self._tools
            self._tools[name] = tool
        if replaced:
            self.logger.warning("Tool '%s' re-registered; previous instance replaced", name)
        else:
            self.logger.debug("Registered tool: %s", name)

    def unregister(self, name: str) -> Optional[BaseTool]:
        with self._lock:
            return self._tools.pop(name, None)

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """
        Retrieve a tool by name.

        Args:
            name: The name of the tool.

        Returns:
            Optional[BaseTool]: The tool instance or None.
        """
        with self._lock:
            return self._tools.get(name)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def is_empty(self) -> bool:
        return len(self) == 0

    async def execute(self, call: ToolCall) -> ToolResult:
        """
        Validate then execute a tool call.

        Args:
            call: The decoded tool call.

        Returns:
            ToolResult: The result of the execution.

        Raises:
            ToolNotFoundError: If the tool name is not registered.
            ToolValidationError: If a required parameter is missing. The
                tool's execute is never invoked in that case.
            Exception: Anything the tool itself raises.
        """
        tool = self.get_tool(call.name)
        if tool is None:
            raise ToolNotFoundError(call.name, available=self.names())

        tool.validate(call)

        if inspect.iscoroutinefunction(tool.execute):
            result = await tool.execute(call)
        else:
            result = await asyncio.to_thread(tool.execute, call)

        self.logger.debug("Tool '%s' finished (success=%s)", call.name, result.success)
        return result

    # --- Introspection ---
    def names(self) -> List[str]:
        """
        List all registered tool names, sorted.

        Returns:
            List[str]: A list of tool names.
        """
        with self._lock:
            return sorted(self._tools)

    def schemas(self) -> List[ToolSchema]:
        with self._lock:
            tools = [self._tools[name] for name in sorted(self._tools)]
        return [t.schema for t in tools]

    def generate_prompt_section(self) -> str:
        """
        Render every registered tool for injection into a system prompt.

        Tools are listed by name so the text is identical across calls
        with the same registrations.

        Returns:
            str: The formatted capability section.
        """
        lines = [PROMPT_HEADER, PROMPT_USAGE]
        for schema in self.schemas():
            lines.append(f"### {schema.name}\n")
            lines.append(f"{schema.description}\n")
            if schema.parameters:
                lines.append("**Parameters:**\n")
                for param in schema.parameters:
                    required = " (required)" if param.required else ""
                    lines.append(
                        f"- `{param.name}` ({param.type}){required}: {param.description}\n"
                    )
            lines.append("\n")
        return "".join(lines)
