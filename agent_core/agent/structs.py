from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_MODEL = "llama3.2"

# --- 1. Generation Config (per call, never persisted) ---


@dataclass
class GenerationOptions:
    """Sampling configuration handed to a provider on every call."""

    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 2048
    top_p: float = 0.9
    stop_sequences: List[str] = field(default_factory=list)
    system_prompt: Optional[str] = None  # Override for providers with a separate slot


# --- 2. Provider Output ---


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_USE = "tool_use"
    CONTENT_FILTER = "content_filter"
    ERROR = "error"

    @classmethod
    def from_backend(cls, value: Optional[str]) -> Optional["FinishReason"]:
        """Map a backend-specific finish/done reason onto the enum."""
        if not value:
            return None
        aliases = {
            "stop": cls.STOP,
            "end_turn": cls.STOP,
            "length": cls.LENGTH,
            "max_tokens": cls.LENGTH,
            "tool_calls": cls.TOOL_USE,
            "tool_use": cls.TOOL_USE,
            "function_call": cls.TOOL_USE,
            "content_filter": cls.CONTENT_FILTER,
            "error": cls.ERROR,
        }
        return aliases.get(str(value).lower())


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_counts(cls, prompt: Optional[int], completion: Optional[int]) -> "TokenUsage":
        prompt = prompt or 0
        completion = completion or 0
        return cls(prompt, completion, prompt + completion)


@dataclass
class Completion:
    """One full response from a provider."""

    content: str
    model: str
    usage: Optional[TokenUsage] = None
    truncated: bool = False
    finish_reason: Optional[FinishReason] = None


@dataclass
class StreamChunk:
    """
    A single streamed delta. ``usage`` is only populated on the terminal
    chunk (``done=True``).
    """

    delta: str
    done: bool = False
    usage: Optional[TokenUsage] = None


# --- 3. Provider Capabilities ---


@dataclass
class ModelInfo:
    id: str
    name: str
    context_length: Optional[int] = None
    supports_vision: bool = False


@dataclass
class ProviderInfo:
    name: str
    version: Optional[str] = None
    models: List[ModelInfo] = field(default_factory=list)
    supports_streaming: bool = False
    supports_tools: bool = False


# --- 4. Agent Status ---


@dataclass
class AgentStatus:
    """Payload for STATUS_CHANGED."""

    status: str
    message: str
    iteration: int = 0
