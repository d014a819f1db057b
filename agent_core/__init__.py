"""
agent-core: a bounded ReAct agent engine.

Providers, a tool registry and a conversation model, tied together by an
agent loop that alternates model completions with tool calls.
"""

from agent_core.agent.context import Conversation, Message, MessageMetadata, Role
from agent_core.agent.core import Agent, AgentBuilder, AgentConfig
from agent_core.agent.structs import (
    Completion,
    FinishReason,
    GenerationOptions,
    ModelInfo,
    ProviderInfo,
    StreamChunk,
    TokenUsage,
)
from agent_core.providers import BaseProvider, ProviderChain, ProviderStrategy
from agent_core.tools import (
    BaseTool,
    ParameterSchema,
    ToolCall,
    ToolRegistry,
    ToolResult,
    ToolSchema,
)

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentBuilder",
    "AgentConfig",
    "BaseProvider",
    "BaseTool",
    "Completion",
    "Conversation",
    "FinishReason",
    "GenerationOptions",
    "Message",
    "MessageMetadata",
    "ModelInfo",
    "ParameterSchema",
    "ProviderChain",
    "ProviderInfo",
    "ProviderStrategy",
    "Role",
    "StreamChunk",
    "TokenUsage",
    "ToolCall",
    "ToolRegistry",
    "ToolResult",
    "ToolSchema",
]
