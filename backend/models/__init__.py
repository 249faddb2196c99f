"""Data models for the EduAgent tutor backend."""
from .conversation import (
    Conversation,
    ConversationLimitError,
    Persona,
    Role,
    Turn,
)
from .responses import GeneratedResponse, ParsedResponse
from .api import (
    AgentResponse,
    ChatRequest,
    ChatResponse,
    CombinedChatResponse,
    ErrorResponse,
    HistoryMessage,
)

__all__ = [
    "Conversation",
    "ConversationLimitError",
    "Persona",
    "Role",
    "Turn",
    "GeneratedResponse",
    "ParsedResponse",
    "AgentResponse",
    "ChatRequest",
    "ChatResponse",
    "CombinedChatResponse",
    "ErrorResponse",
    "HistoryMessage",
]
