from enum import Enum


class EventTypes(str, Enum):
    """
    Canonical event names emitted by the agent loop.
    Using an Enum prevents typo bugs (e.g., 'tool_start' vs 'tool_execution_start').
    """

    # 1. System Events
    STATUS_CHANGED = "status_changed"
    WARNING = "warning"
    ERROR = "error"

    # 2. Conversation Events
    THINKING_STARTED = "thinking_started"
    RESPONSE_COMPLETE = "response_complete"

    # 3. Tool Execution Events
    TOOL_EXECUTION_START = "tool_execution_start"
    TOOL_EXECUTION_COMPLETE = "tool_execution_complete"

    # 4. Context Events
    CONTEXT_TRUNCATED = "context_truncated"
