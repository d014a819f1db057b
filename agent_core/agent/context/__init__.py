from .conversation import Conversation, DEFAULT_MAX_CONTEXT_TOKENS
from .message import Message, MessageMetadata, Role
from . import logic

__all__ = [
    "Conversation",
    "DEFAULT_MAX_CONTEXT_TOKENS",
    "Message",
    "MessageMetadata",
    "Role",
    "logic",
]
