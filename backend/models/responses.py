"""Generated response models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .conversation import Persona, utcnow


@dataclass(frozen=True)
class GeneratedResponse:
    """Text produced by one persona."""
    text: str
    persona: Persona
    produced_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.text,
            "agentPersona": self.persona.value,
            "timestamp": self.produced_at.isoformat(),
        }


@dataclass(frozen=True)
class ParsedResponse:
    """Explanation and example split out of one combined reply."""
    explanation: str
    example: str
