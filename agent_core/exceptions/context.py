#!/usr/bin/env python3
"""
Context Exception Definitions for agent-core

All context-related exceptions inherit from AgentCoreError.
"""

from .base import AgentCoreError


class ContextError(AgentCoreError):
    """Base exception for context management errors."""

    category = "context"


class ContextOverflowError(ContextError):
    """Raised when context token limit is exceeded."""

    category = "context_overflow"
    default_hint = "The conversation is too long. Please start a new session."

    def __init__(self, current_tokens: int, max_tokens: int):
        super().__init__(
            f"Context length exceeded: {current_tokens} tokens (max: {max_tokens})"
        )
        self.current_tokens = current_tokens
        self.max_tokens = max_tokens
        self.details.update(used=current_tokens, max=max_tokens)
