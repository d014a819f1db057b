from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Sequence

from agent_core.agent.context.message import Message
from agent_core.agent.context.logic import count_tokens
from agent_core.agent.structs import (
    Completion,
    GenerationOptions,
    ModelInfo,
    ProviderInfo,
    StreamChunk,
)


class BaseProvider(ABC):
    """
    The Abstract Base Class (Contract) for all LLM Providers.

    Implement this to add a new backend; the agent works exclusively
    through this interface. Implementations must tolerate concurrent
    ``complete`` / ``complete_stream`` calls and must not retry internally.

    Failure contract:
        ProviderNotAvailableError: backend unreachable (retryable).
        ProviderRateLimitError: throttled (retryable).
        ProviderError: malformed request or backend-side error.
    """

    @abstractmethod
    async def info(self) -> ProviderInfo:
        """Provider name and capabilities."""

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Ping the provider to ensure availability/authentication.
        Must return False on any backend failure, never raise.
        """

    @abstractmethod
    async def complete(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> Completion:
        """Generate one full completion."""

    @abstractmethod
    def complete_stream(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream a completion.

        Yields:
            StreamChunk: Deltas, terminated by a chunk with ``done=True``.
            Each step may raise a provider error.
        """

    @abstractmethod
    async def list_models(self) -> List[ModelInfo]:
        """Models this backend can serve."""

    def estimate_tokens(self, text: str) -> int:
        """Provider-specific heuristic. Default: ~4 characters per token."""
        return count_tokens(text)
