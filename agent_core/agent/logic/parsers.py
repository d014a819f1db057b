"""
Response Parsing Logic
======================
Pure functions for extracting a tool call from raw model text.

Two stages, best effort:
    1. A fenced block opened by ```tool and closed by the next ```.
    2. Only if stage 1 yields nothing: when the text mentions "tool",
       the span from the first '{' to the last '}'.

Neither stage ever raises. A span that does not decode is "no tool call".
The brace scan can capture unrelated or nested JSON-like text; that is a
known edge case of the format, not something this module tries to repair.
"""

import json
import logging
import uuid
from typing import Optional

from pydantic import ValidationError

from agent_core.exceptions import ToolCallParseError
from agent_core.tools.base import ToolCall

logger = logging.getLogger(__name__)

FENCE_OPEN = "```tool"
FENCE_CLOSE = "```"
TOOL_KEY_MARKER = '"tool"'


class ToolCallParser:
    """Extracts a single tool call from assistant text."""

    @staticmethod
    def decode(raw: str) -> ToolCall:
        """
        Decode a JSON span into a ToolCall.

        Raises:
            ToolCallParseError: If the span is not a valid ToolCall object.
        """
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ToolCallParseError(str(e), raw_text=raw, original_error=e) from e

        if not isinstance(payload, dict):
            raise ToolCallParseError("tool call must be a JSON object", raw_text=raw)

        try:
            return ToolCall.model_validate(payload)
        except ValidationError as e:
            raise ToolCallParseError(str(e), raw_text=raw, original_error=e) from e

    @staticmethod
    def parse_fenced(content: str) -> Optional[ToolCall]:
        start_idx = content.find(FENCE_OPEN)
        if start_idx == -1:
            return None

        after_marker = content[start_idx + len(FENCE_OPEN):]
        end_idx = after_marker.find(FENCE_CLOSE)
        if end_idx == -1:
            return None

        try:
            call = ToolCallParser.decode(after_marker[:end_idx].strip())
        except ToolCallParseError as e:
            logger.debug("Fenced tool block did not decode: %s", e)
            return None

        if not call.id:
            call.id = str(uuid.uuid4())
        return call

    @staticmethod
    def parse_inline(content: str) -> Optional[ToolCall]:
        if TOOL_KEY_MARKER not in content:
            return None

        start = content.find("{")
        end = content.rfind("}")
        if start == -1 or end <= start:
            return None

        try:
            return ToolCallParser.decode(content[start:end + 1])
        except ToolCallParseError as e:
            logger.debug("Inline tool span did not decode: %s", e)
            return None

    @staticmethod
    def parse(content: str) -> Optional[ToolCall]:
        """
        Find the tool call in a model response, if any.

        Returns:
            Optional[ToolCall]: None when neither stage produced a call.
        """
        return ToolCallParser.parse_fenced(content) or ToolCallParser.parse_inline(
            content
        )
