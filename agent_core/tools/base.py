"""
Base classes and interfaces for the tool system.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union, Awaitable

from pydantic import BaseModel, ConfigDict, Field

from agent_core.exceptions import ToolValidationError


@dataclass
class ParameterSchema:
    """One named tool parameter."""

    name: str
    type: str
    description: str
    required: bool = True
    default: Any = None
    enum_values: Optional[List[str]] = None


@dataclass
class ToolSchema:
    """Describes a tool's interface."""

    name: str
    description: str
    parameters: List[ParameterSchema] = field(default_factory=list)
    category: Optional[str] = None
    has_side_effects: bool = False

    @property
    def required_params(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]


class ToolCall(BaseModel):
    """
    A tool invocation decoded from model output.

    The wire key for the tool name is ``tool``:
        {"tool": "calculate", "arguments": {"expression": "2+2"}, "id": "..."}
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="tool")
    arguments: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None


@dataclass
class ToolResult:
    """Standardized result from tool execution."""

    name: str
    success: bool
    output: str
    id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(
        cls, name: str, output: str, data: Optional[Dict[str, Any]] = None
    ):
        """Create a successful execution result."""
        return cls(name=name, success=True, output=output, data=data)

    @classmethod
    def failure(cls, name: str, error: str):
        """Create a failed execution result."""
        return cls(name=name, success=False, output=error)

    def with_id(self, call_id: Optional[str]) -> "ToolResult":
        """Copy carrying the call id; the original is left untouched."""
        return replace(self, id=call_id)

    def with_data(self, data: Dict[str, Any]) -> "ToolResult":
        return replace(self, data=data)


class BaseTool(ABC):
    """
    Abstract base class for all tools.

    ``execute`` may be a plain method or a coroutine. Plain methods run in
    a worker thread so they cannot block the event loop.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"tools.{self.__class__.__name__}")

    @property
    @abstractmethod
    def schema(self) -> ToolSchema:
        """Return the tool's schema definition."""

    @abstractmethod
    def execute(self, call: ToolCall) -> Union[ToolResult, Awaitable[ToolResult]]:
        """Execute the tool's main logic."""

    def validate(self, call: ToolCall) -> None:
        """
        Check required parameters are present (presence only, no type checks).

        Raises:
            ToolValidationError: Naming the first missing parameter.
        """
        for param in self.schema.required_params:
            if param not in call.arguments:
                raise ToolValidationError(
                    f"Missing required parameter '{param}' for tool '{self.schema.name}'",
                    tool_name=self.schema.name,
                    missing_param=param,
                )
