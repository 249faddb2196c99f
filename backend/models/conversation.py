"""Conversation data models."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

MAX_CONTENT_LENGTH = 5000
MAX_TURNS = 100
MAX_LABEL_LENGTH = 200


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp sent by a client.

    Browsers serialise dates with a trailing 'Z', which older
    datetime.fromisoformat() versions reject. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Role(str, Enum):
    """Who produced a turn."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @property
    def remote_role(self) -> str:
        """Gemini only understands 'user' and 'model'."""
        return "user" if self is Role.USER else "model"


class Persona(str, Enum):
    """Tutor personas. Each carries a fixed teaching-style instruction."""
    EXPLAINER = "explainer"
    EXAMPLE_PROVIDER = "example_provider"

    @property
    def instruction(self) -> str:
        return PERSONA_INSTRUCTIONS[self]

    @property
    def label(self) -> str:
        return PERSONA_LABELS[self]


PERSONA_INSTRUCTIONS = {
    Persona.EXPLAINER: (
        "You are an expert teacher who explains concepts clearly and concisely. "
        "Focus on breaking down complex ideas into understandable parts."
    ),
    Persona.EXAMPLE_PROVIDER: (
        "You are a practical teacher who provides real-world examples and applications. "
        "Focus on giving concrete examples that illustrate the concepts being discussed."
    ),
}

PERSONA_LABELS = {
    Persona.EXPLAINER: "Explainer",
    Persona.EXAMPLE_PROVIDER: "Example Provider",
}


class ConversationLimitError(ValueError):
    """Raised when appending to a conversation that is already at capacity."""


@dataclass(frozen=True)
class Turn:
    """Represents a single turn in a conversation."""
    role: Role
    content: str
    created_at: datetime = field(default_factory=utcnow)
    persona: Optional[Persona] = None

    def __post_init__(self):
        if not isinstance(self.content, str):
            raise ValueError("Turn content must be a non-empty string")

        content = self.content.strip()
        if not content:
            raise ValueError("Turn content cannot be empty")
        if len(content) > MAX_CONTENT_LENGTH:
            raise ValueError(
                f"Turn content exceeds maximum length of {MAX_CONTENT_LENGTH} characters"
            )

        object.__setattr__(self, "content", content)
        object.__setattr__(self, "role", Role(self.role))
        # Naive timestamps are taken as UTC so serialized turns compare equal
        object.__setattr__(self, "created_at", parse_timestamp(self.created_at))
        if self.persona is not None:
            object.__setattr__(self, "persona", Persona(self.persona))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the turn to a JSON-compatible dict."""
        data = {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.created_at.isoformat(),
        }
        if self.persona is not None:
            data["persona"] = self.persona.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        """
        Rebuild a turn from its serialized form.

        Accepts either 'persona' or the browser client's 'agentPersona' key.
        A missing timestamp means "now".

        Raises:
            ValueError: If the role, persona, timestamp or content is invalid
        """
        persona = data.get("persona") or data.get("agentPersona")
        timestamp = data.get("timestamp")

        return cls(
            role=Role(data.get("role")),
            content=data.get("content"),
            created_at=parse_timestamp(timestamp) if timestamp else utcnow(),
            persona=Persona(persona) if persona else None,
        )


def to_remote_format(turns) -> List[Dict[str, str]]:
    """Map turns to the remote model's two-role {role, content} shape."""
    return [{"role": turn.role.remote_role, "content": turn.content} for turn in turns]


class Conversation:
    """Ordered, bounded log of turns for a single request."""

    def __init__(
        self,
        turns=None,
        subject: Optional[str] = None,
        topic: Optional[str] = None,
        max_turns: int = MAX_TURNS
    ):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")

        self.max_turns = max_turns
        self.subject = _clean_label("subject", subject)
        self.topic = _clean_label("topic", topic)
        self.created_at = utcnow()
        self._turns: List[Turn] = []

        for turn in turns or []:
            self.append(turn)

    def append(self, turn: Turn) -> None:
        """
        Add a turn to the end of the conversation.

        Raises:
            ConversationLimitError: If the conversation already holds max_turns
            TypeError: If turn is not a Turn
        """
        if not isinstance(turn, Turn):
            raise TypeError(f"Expected Turn, got {type(turn).__name__}")
        if len(self._turns) >= self.max_turns:
            raise ConversationLimitError(
                f"Conversation history limit of {self.max_turns} turns reached"
            )
        self._turns.append(turn)

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def latest(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def recent(self, count: int) -> Tuple[Turn, ...]:
        """Return the last `count` turns in order."""
        if count <= 0:
            return ()
        return tuple(self._turns[-count:])

    def to_remote_format(self) -> List[Dict[str, str]]:
        return to_remote_format(self._turns)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "turns": [turn.to_dict() for turn in self._turns],
            "createdAt": self.created_at.isoformat(),
        }
        if self.subject:
            data["subject"] = self.subject
        if self.topic:
            data["topic"] = self.topic
        return data

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))


def _clean_label(name: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > MAX_LABEL_LENGTH:
        raise ValueError(f"{name} must not exceed {MAX_LABEL_LENGTH} characters")
    return value or None
