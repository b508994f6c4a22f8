"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- Message (role, content) and ChatSession (one document-scoped thread).
- UserProfile / AuthStatus for the identity adapter.
- TutorRequest and the tagged TutorSuccess | TutorFailure result.
- LLMSettings (model, temperature, top_p, max_tokens).

Testing: Trivial; mostly types. Serialization helpers are covered by the
session store round-trip tests.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    MODEL = "model"


class AuthStatus(str, Enum):
    LOADING = "loading"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


class ExchangePhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class ExchangeStatus(str, Enum):
    REJECTED = "rejected"
    ANSWERED = "answered"
    FAILED = "failed"
    STALE = "stale"


@dataclass(frozen=True)
class Message:
    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        return cls(role=MessageRole(data["role"]), content=str(data["content"]))


@dataclass
class ChatSession:
    id: str
    source_file_name: str
    source_data_uri: str
    messages: list[Message] = field(default_factory=list)
    # Uploaded file handle; lives only as long as the browser tab.
    source_file: Optional[Any] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Persisted shape. Transient fields are left out."""
        return {
            "id": self.id,
            "sourceFileName": self.source_file_name,
            "sourceDataUri": self.source_data_uri,
            "messages": [m.to_dict() for m in self.messages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatSession":
        return cls(
            id=str(data["id"]),
            source_file_name=str(data["sourceFileName"]),
            source_data_uri=str(data["sourceDataUri"]),
            messages=[Message.from_dict(m) for m in data.get("messages") or []],
        )


@dataclass(frozen=True)
class UserProfile:
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class TutorRequest:
    document_data_uri: str
    document_name: str
    question: str
    transcript: str
    simple_mode: bool = False


@dataclass(frozen=True)
class TutorSuccess:
    answer: str
    meta: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TutorFailure:
    reason: str
    error: Optional[BaseException] = None


TutorResult = Union[TutorSuccess, TutorFailure]


@dataclass(frozen=True)
class PendingExchange:
    session_id: str
    question: str
    snapshot: tuple[Message, ...]
    exchange_id: int = 0


@dataclass(frozen=True)
class ExchangeOutcome:
    status: ExchangeStatus
    session_id: Optional[str] = None
    answer: Optional[str] = None
    error: Optional[str] = None
    restored_input: Optional[str] = None


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


@dataclass(frozen=True)
class Price:
    input_per_1M: float
    output_per_1M: float
