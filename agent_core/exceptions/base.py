#!/usr/bin/env python3
"""
Base Exception Contract for agent-core

Provides the single source of truth for the agent-core error contract.
All domain-specific exceptions must inherit from AgentCoreError.
"""

from typing import Optional


class AgentCoreError(Exception):
    """
    The Base Contract for all agent-core errors.

    Every subclass carries a machine-readable ``category`` and a
    ``retryable`` flag so callers (or a provider chain) can decide whether
    to retry or fail over. The core itself never retries.
    """

    category: str = "internal"
    retryable: bool = False
    default_hint: str = "An unexpected error occurred."

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        user_hint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.user_hint = user_hint or self.default_hint
        self.details = details or {}

    @property
    def user_message(self) -> str:
        """Human-readable message suitable for end users."""
        return self.user_hint

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "message": self.message,
            "retryable": self.retryable,
            "user_message": self.user_message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message

