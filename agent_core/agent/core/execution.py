import asyncio
import time
import logging
from typing import Optional

from agent_core.tools.base import ToolCall, ToolResult
from agent_core.tools.registry import ToolRegistry


class ToolExecutor:
    """
    The Safe Runner.
    Isolates tool dispatch from the main loop logic.

    Every failure (unknown tool, validation, timeout, crash) comes back as
    a failed ToolResult with output "Error: <message>". Nothing raised by
    dispatch reaches the loop.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._timeout = timeout_seconds
        self._logger = logging.getLogger("ToolExecutor")

    async def execute(self, call: ToolCall, registry: ToolRegistry) -> ToolResult:
        """
        Executes a tool call. The result id is always the call id.
        """
        start_time = time.time()
        self._logger.info(f"Executing {call.name} (ID: {call.id})")

        try:
            if self._timeout is None:
                result = await registry.execute(call)
            else:
                result = await asyncio.wait_for(
                    registry.execute(call), timeout=self._timeout
                )

        except asyncio.TimeoutError:
            self._logger.error(f"Tool {call.name} timed out after {self._timeout}s")
            return ToolResult.failure(
                call.name, f"Error: Execution timed out after {self._timeout} seconds."
            ).with_id(call.id)

        except Exception as e:
            # Catch-all barrier: tool errors become observations for the model.
            self._logger.warning(f"Tool {call.name} failed: {e}")
            return ToolResult.failure(call.name, f"Error: {e}").with_id(call.id)

        duration = time.time() - start_time
        self._logger.debug(f"Tool {call.name} completed in {duration:.3f}s")
        return result.with_id(call.id)
