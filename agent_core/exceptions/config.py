#!/usr/bin/env python3
"""
Configuration Exception Definitions for agent-core

All configuration-related exceptions inherit from AgentCoreError.
"""

from .base import AgentCoreError


class ConfigError(AgentCoreError):
    """Raised when settings cannot be loaded or fail validation."""

    category = "configuration"

    def __init__(self, message, field_name=None, invalid_value=None):
        super().__init__(message)
        self.field_name = field_name
        self.invalid_value = invalid_value


class EventBusError(AgentCoreError):
    """
    Critical failure in the event distribution system.

    Used when a subscription is malformed (non-coroutine handler).
    """

    category = "event_bus"
