import logging
import asyncio
import inspect
from typing import Dict, List, Callable, Any, Awaitable

from agent_core.exceptions import EventBusError
from .events import EventTypes

# Type definition for event handlers
EventHandler = Callable[[Any], Awaitable[None]]


class EventBus:
    """
    Asynchronous Event Bus.

    Design:
    - Subscriber registration is lock-guarded.
    - Snapshot Execution: Iterates over a copy of handlers so handlers may
      subscribe or unsubscribe while an event is being dispatched.
    - Handlers run sequentially, in subscription order.
    - Fail-soft: a raising handler is logged and the rest still run.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._subscribers: Dict[EventTypes, List[EventHandler]] = {}
        self._logger = logging.getLogger("EventBus")

    async def subscribe(self, event_type: EventTypes, handler: EventHandler) -> None:
        """
        Register a coroutine callback for a specific event type.

        Raises:
            EventBusError: If the handler is not a coroutine function.
        """
        if not inspect.iscoroutinefunction(handler):
            raise EventBusError(
                f"Handler for {event_type.value} must be a coroutine function"
            )
        async with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)

    async def unsubscribe(self, event_type: EventTypes, handler: EventHandler) -> None:
        async with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    async def emit(self, event_type: EventTypes, data: Any = None) -> None:
        """
        Emit an event to all subscribers.
        """
        if event_type not in self._subscribers:
            return

        # Lock briefly to copy the list.
        async with self._lock:
            handlers_snapshot = list(self._subscribers.get(event_type, []))

        for handler in handlers_snapshot:
            # Skip handlers removed while an earlier handler was running.
            async with self._lock:
                if handler not in self._subscribers.get(event_type, []):
                    continue

            try:
                await handler(data)
            except Exception as e:
                self._logger.error(
                    f"Error in handler for {event_type.value}: {e}", exc_info=True
                )
