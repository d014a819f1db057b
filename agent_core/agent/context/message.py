from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

# Fixed per-message cost for role/formatting tokens.
MESSAGE_OVERHEAD_TOKENS = 4
CHARS_PER_TOKEN = 4


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"

    def __str__(self) -> str:
        return self.value


@dataclass
class MessageMetadata:
    """
    Optional technical data attached to a message.

    Attributes:
        tokens: Token count, when the provider reported one.
        tool_call_id: Call id this tool message answers.
        model: Model that generated an assistant message.
        extra: Free-form JSON-compatible key/value pairs.
    """

    tokens: Optional[int] = None
    tool_call_id: Optional[str] = None
    model: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.tokens is not None:
            data["tokens"] = self.tokens
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.model is not None:
            data["model"] = self.model
        return data


@dataclass(frozen=True)
class Message:
    """
    A single atomic unit of conversation history.

    Messages are frozen once created. Metadata is the one mutable part and
    is only changed through ``update_metadata``.
    """

    role: Role
    content: str
    name: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Optional[MessageMetadata] = None

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str, model: Optional[str] = None) -> "Message":
        metadata = MessageMetadata(model=model) if model else None
        return cls(Role.ASSISTANT, content, metadata=metadata)

    @classmethod
    def tool(cls, content: str, tool_call_id: Optional[str] = None) -> "Message":
        metadata = MessageMetadata(tool_call_id=tool_call_id) if tool_call_id else None
        return cls(Role.TOOL, content, metadata=metadata)

    def with_name(self, name: str) -> "Message":
        return replace(self, name=name)

    def update_metadata(
        self,
        tokens: Optional[int] = None,
        model: Optional[str] = None,
        **extra: Any,
    ) -> MessageMetadata:
        """Explicit metadata update, the only mutation allowed after append."""
        if self.metadata is None:
            # Frozen dataclass: metadata slot is assigned once, in place.
            object.__setattr__(self, "metadata", MessageMetadata())
        if tokens is not None:
            self.metadata.tokens = tokens
        if model is not None:
            self.metadata.model = model
        self.metadata.extra.update(extra)
        return self.metadata

    @property
    def tool_call_id(self) -> Optional[str]:
        return self.metadata.tool_call_id if self.metadata else None

    def estimate_tokens(self) -> int:
        """Rough size: ~4 characters per token plus role overhead."""
        return len(self.content) // CHARS_PER_TOKEN + MESSAGE_OVERHEAD_TOKENS

    def to_dict(self) -> Dict[str, Any]:
        """
        Provider-neutral payload. Internal fields (timestamp, metadata)
        are not sent to any API.
        """
        msg: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name:
            msg["name"] = self.name
        return msg
