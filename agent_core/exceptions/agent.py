#!/usr/bin/env python3
"""
Agent Exception Definitions for agent-core

Loop-level exceptions that don't fit in other categories.
"""

from .base import AgentCoreError


class AgentError(AgentCoreError):
    """Base exception for agent-level errors."""

    category = "agent"


class MaxIterationsError(AgentError):
    """
    Raised when the reasoning loop exceeds its iteration bound.

    The conversation passed to the loop keeps every message accumulated
    before the limit was hit.
    """

    category = "max_iterations"
    default_hint = "The request took too long to process. Please try a simpler query."

    def __init__(self, limit: int):
        super().__init__(f"Maximum iterations ({limit}) reached")
        self.limit = limit
        self.details["limit"] = limit


class OperationCancelledError(AgentError):
    """Raised when an external cancellation signal stops the loop."""

    category = "cancelled"
    default_hint = "The request was cancelled."

    def __init__(self, message="Operation cancelled", iteration=None):
        super().__init__(message)
        self.iteration = iteration


class ConfigurationError(AgentError):
    """Raised when agent configuration is invalid or missing."""

    category = "configuration"

    def __init__(self, message, **kwargs):
        super().__init__(f"Configuration error: {message}", **kwargs)
