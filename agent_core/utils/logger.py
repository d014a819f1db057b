import logging
import sys
from typing import Any, Optional

from agent_core.protocol.bus import EventBus
from agent_core.protocol.events import EventTypes

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO", stream=None) -> None:
    """
    Configure the root logger once for the process.

    Components log through their own named loggers
    (``logging.getLogger("Agent")`` etc.), so this only installs a handler.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        if getattr(handler, "_agent_core", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._agent_core = True
    root.addHandler(handler)

    # Third-party HTTP clients are noisy at INFO.
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class EventLogger:
    """
    Mirrors agent lifecycle events from the bus into the log.
    """

    def __init__(self, bus: EventBus, logger: Optional[logging.Logger] = None):
        self._bus = bus
        self._logger = logger or logging.getLogger("AgentEvents")

    async def start(self):
        """Subscribe to the bus."""
        await self._bus.subscribe(EventTypes.STATUS_CHANGED, self._log_status)
        await self._bus.subscribe(EventTypes.WARNING, self._log_warning)
        await self._bus.subscribe(EventTypes.ERROR, self._log_error)
        await self._bus.subscribe(EventTypes.TOOL_EXECUTION_START, self._log_tool_start)
        await self._bus.subscribe(EventTypes.TOOL_EXECUTION_COMPLETE, self._log_tool)
        await self._bus.subscribe(EventTypes.RESPONSE_COMPLETE, self._log_response)
        await self._bus.subscribe(EventTypes.CONTEXT_TRUNCATED, self._log_context_event)

    # --- Handlers ---

    async def _log_warning(self, data: Any):
        msg = data.get("message", str(data)) if isinstance(data, dict) else str(data)
        self._logger.warning(msg)

    async def _log_error(self, data: Any):
        msg = data.get("message", str(data)) if isinstance(data, dict) else str(data)
        self._logger.error(f"ERROR: {msg}")

    async def _log_status(self, data: Any):
        # AgentStatus dataclass or Dict
        if hasattr(data, "status"):
            status = data.status
            msg = data.message
        else:
            status = data.get("status")
            msg = data.get("message")

        self._logger.debug(f"STATUS: {status} | {msg}")

    async def _log_tool_start(self, data: Any):
        self._logger.info(f"TOOL: {data.get('tool_name', 'unknown')} started")

    async def _log_tool(self, data: Any):
        tool = getattr(data, "name", "unknown")
        outcome = "finished" if getattr(data, "success", False) else "failed"
        self._logger.info(f"TOOL: {tool} {outcome}")

    async def _log_response(self, data: Any):
        content = data.get("content", "") if isinstance(data, dict) else str(data)
        self._logger.debug(f"MODEL: {content}")

    async def _log_context_event(self, data: Any):
        self._logger.info(f"CONTEXT: {data}")
