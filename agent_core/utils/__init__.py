from .logger import EventLogger, setup_logging

__all__ = ["EventLogger", "setup_logging"]
