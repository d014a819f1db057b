from .events import EventTypes
from .bus import EventBus

__all__ = ["EventTypes", "EventBus"]
