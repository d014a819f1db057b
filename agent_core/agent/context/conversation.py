import logging
from typing import Iterator, List, Optional, Sequence

from agent_core.exceptions import ContextOverflowError
from . import logic
from .message import Message, Role

DEFAULT_MAX_CONTEXT_TOKENS = 8192

logger = logging.getLogger("Conversation")


class Conversation:
    """
    Ordered dialogue state with a token budget.

    The sequence order is the canonical dialogue order. Callers may append
    and truncate; nothing here reorders messages. At most one leading
    SYSTEM message is treated as the system prompt.

    THREAD SAFETY:
    - Not synchronised. One conversation belongs to one running loop.
    - All mutations happen without await points in between.
    """

    def __init__(
        self,
        messages: Optional[Sequence[Message]] = None,
        max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS,
    ):
        self._messages: List[Message] = list(messages or [])
        self.max_context_tokens = max_context_tokens

    @classmethod
    def with_system_prompt(
        cls, prompt: str, max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS
    ) -> "Conversation":
        return cls([Message.system(prompt)], max_context_tokens=max_context_tokens)

    def push(self, message: Message) -> None:
        """Appends a message to the history."""
        self._messages.append(message)

    def prepend_system(self, message: Message) -> None:
        """
        Installs the system prompt at position 0.
        Only valid while the conversation has no leading system message.
        """
        if message.role != Role.SYSTEM:
            raise ValueError("prepend_system expects a system message")
        if self.system_prompt() is not None:
            raise ValueError("conversation already has a system prompt")
        self._messages.insert(0, message)

    def messages(self) -> Sequence[Message]:
        """Read-only view of the history, in order."""
        return tuple(self._messages)

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def system_prompt(self) -> Optional[Message]:
        if self._messages and self._messages[0].role == Role.SYSTEM:
            return self._messages[0]
        return None

    def clear_history(self) -> None:
        """Drop everything except system messages."""
        self._messages = [m for m in self._messages if m.role == Role.SYSTEM]

    def estimate_tokens(self) -> int:
        return logic.total_tokens(self._messages)

    def truncate_to_fit(self) -> int:
        """
        Evict the oldest middle history until the estimate fits the budget.

        Best effort: the system message and the final message are never
        removed, so the result may still be over budget.

        Returns:
            int: Number of evicted messages.
        """
        removed = 0
        while logic.should_prune(
            self.estimate_tokens(), self.max_context_tokens, len(self._messages)
        ):
            index = logic.eviction_index(self._messages)
            if index is None:
                break
            evicted = self._messages.pop(index)
            removed += 1
            logger.debug(
                "Evicted %s message at index %d (%d tokens)",
                evicted.role.value,
                index,
                evicted.estimate_tokens(),
            )

        if removed:
            logger.info(
                "Truncated conversation: removed %d message(s), %d/%d tokens",
                removed,
                self.estimate_tokens(),
                self.max_context_tokens,
            )
        return removed

    def ensure_within_budget(self) -> None:
        """Truncate, then fail if the protected messages alone overflow."""
        self.truncate_to_fit()
        used = self.estimate_tokens()
        if used > self.max_context_tokens:
            raise ContextOverflowError(used, self.max_context_tokens)

    def count(self, role: Role) -> int:
        return sum(1 for m in self._messages if m.role == role)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def is_empty(self) -> bool:
        return not self._messages
