#!/usr/bin/env python3
"""
agent-core Exceptions Package

Unified exception hierarchy for the agent orchestration engine.
"""

# Base exceptions
from .base import AgentCoreError

# Provider exceptions
from .provider import (
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
    ProviderAuthenticationError,
    ProviderConfigurationError,
)

# Tool exceptions
from .tools import (
    ToolError,
    ToolNotFoundError,
    ToolValidationError,
    ToolExecutionError,
    ToolCallParseError,
)

# Context exceptions
from .context import ContextError, ContextOverflowError

# Agent exceptions
from .agent import (
    AgentError,
    ConfigurationError,
    MaxIterationsError,
    OperationCancelledError,
)

# Config exceptions
from .config import ConfigError, EventBusError


__all__ = [
    # Base
    "AgentCoreError",
    # Provider
    "ProviderError",
    "ProviderNotAvailableError",
    "ProviderRateLimitError",
    "ProviderAuthenticationError",
    "ProviderConfigurationError",
    # Tool
    "ToolError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
    "ToolCallParseError",
    # Context
    "ContextError",
    "ContextOverflowError",
    # Agent
    "AgentError",
    "ConfigurationError",
    "MaxIterationsError",
    "OperationCancelledError",
    # Config
    "ConfigError",
    "EventBusError",
]
