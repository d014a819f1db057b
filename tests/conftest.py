"""Shared fakes: a scripted provider and a few small tools."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pytest

from agent_core.agent.context import Message
from agent_core.agent.structs import (
    Completion,
    FinishReason,
    GenerationOptions,
    ModelInfo,
    ProviderInfo,
    StreamChunk,
    TokenUsage,
)
from agent_core.exceptions import ToolExecutionError
from agent_core.providers.base import BaseProvider
from agent_core.tools.base import BaseTool, ParameterSchema, ToolCall, ToolResult, ToolSchema


class ScriptedProvider(BaseProvider):
    """Returns canned responses in order; repeats the last one when exhausted."""

    def __init__(self, responses: Sequence[str], name: str = "scripted"):
        self.responses = list(responses)
        self.name = name
        self.calls: List[List[Message]] = []
        self.options: List[GenerationOptions] = []
        self.healthy = True

    async def info(self) -> ProviderInfo:
        return ProviderInfo(name=self.name, models=[ModelInfo("fake", "fake")])

    async def health_check(self) -> bool:
        return self.healthy

    async def complete(self, messages, options) -> Completion:
        self.calls.append(list(messages))
        self.options.append(options)
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        content = self.responses[index]
        return Completion(
            content=content,
            model=options.model,
            usage=TokenUsage.from_counts(10, len(content) // 4),
            finish_reason=FinishReason.STOP,
        )

    async def complete_stream(self, messages, options):
        completion = await self.complete(messages, options)
        for word in completion.content.split(" "):
            yield StreamChunk(delta=word)
        yield StreamChunk(delta="", done=True, usage=completion.usage)

    async def list_models(self) -> List[ModelInfo]:
        return [ModelInfo("fake", "fake")]


class FailingProvider(ScriptedProvider):
    def __init__(self, error: Exception):
        super().__init__(["unused"], name="failing")
        self.error = error

    async def complete(self, messages, options) -> Completion:
        self.calls.append(list(messages))
        raise self.error


class CalculatorTool(BaseTool):
    """Evaluates `a + b` style expressions with two integer operands."""

    def __init__(self):
        super().__init__()
        self.invocations = 0

    @property
    def schema(self) -> ToolSchema:
        return ToolSchema(
            name="calculate",
            description="Evaluate a simple arithmetic expression",
            parameters=[
                ParameterSchema("expression", "string", "Expression such as '2 + 2'"),
            ],
        )

    def execute(self, call: ToolCall) -> ToolResult:
        self.invocations += 1
        expression = str(call.arguments["expression"])
        left, _, right = expression.partition("+")
        try:
            total = int(left) + int(right)
        except ValueError as e:
            raise ToolExecutionError(f"cannot evaluate '{expression}'", "calculate", e)
        return ToolResult.success_result("calculate", str(total), {"value": total})


class DateTimeTool(BaseTool):
    @property
    def schema(self) -> ToolSchema:
        return ToolSchema(
            name="datetime",
            description="Current UTC time",
            parameters=[
                ParameterSchema(
                    "format", "string", "strftime format", required=False, default="%Y"
                ),
            ],
        )

    async def execute(self, call: ToolCall) -> ToolResult:
        fmt = call.arguments.get("format", "%Y")
        return ToolResult.success_result("datetime", datetime.now(timezone.utc).strftime(fmt))


class ExplodingTool(BaseTool):
    @property
    def schema(self) -> ToolSchema:
        return ToolSchema(name="explode", description="Always fails")

    async def execute(self, call: ToolCall) -> ToolResult:
        raise RuntimeError("boom")


def fenced(tool: str, arguments: dict, call_id: Optional[str] = None) -> str:
    payload = {"tool": tool, "arguments": arguments}
    if call_id:
        payload["id"] = call_id
    return f"```tool\n{json.dumps(payload)}\n```"


@pytest.fixture
def calculator():
    return CalculatorTool()


@pytest.fixture
def clock():
    return DateTimeTool()
