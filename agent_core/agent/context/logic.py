from typing import Optional, Sequence

from .message import CHARS_PER_TOKEN, Message, Role


def count_tokens(text: str) -> int:
    """
    Pure function to estimate token count.

    Not a tokenizer: a safe estimation (chars / 4) used only for budget
    tracking.
    """
    if not text:
        return 0
    return len(text) // CHARS_PER_TOKEN


def total_tokens(messages: Sequence[Message]) -> int:
    return sum(m.estimate_tokens() for m in messages)


def should_prune(used_tokens: int, limit: int, message_count: int) -> bool:
    """
    Decides if context is overflowing and eviction is still possible.
    Two messages (system + latest, or the latest exchange) are the floor.
    """
    return used_tokens > limit and message_count > 2


def eviction_index(messages: Sequence[Message]) -> Optional[int]:
    """
    Index of the next message to evict, or None when nothing is evictable.

    Strategy:
    1. Never touch SYSTEM messages.
    2. Take the earliest non-system message.
    3. Never the final message: the most recent turn must survive.
    """
    for i, msg in enumerate(messages):
        if msg.role == Role.SYSTEM:
            continue
        if i == len(messages) - 1:
            return None
        return i
    return None
