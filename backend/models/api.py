"""Request and response schemas for the chat API."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .conversation import MAX_CONTENT_LENGTH, MAX_LABEL_LENGTH, Persona


class HistoryMessage(BaseModel):
    """One prior turn replayed by the client."""
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: Optional[datetime] = None
    persona: Optional[Persona] = Field(
        default=None,
        validation_alias=AliasChoices("persona", "agentPersona"),
    )


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    conversation_history: List[HistoryMessage] = Field(
        default_factory=list,
        alias="conversationHistory",
    )
    subject: Optional[str] = Field(default=None, max_length=MAX_LABEL_LENGTH)
    topic: Optional[str] = Field(default=None, max_length=MAX_LABEL_LENGTH)

    @field_validator("message", "subject", "topic", mode="before")
    @classmethod
    def strip_whitespace(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("conversation_history", mode="before")
    @classmethod
    def default_history(cls, value):
        return [] if value is None else value


class AgentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    agent_persona: Persona = Field(alias="agentPersona")
    timestamp: datetime


class ChatResponse(BaseModel):
    success: bool = True
    responses: List[AgentResponse]


class CombinedChatResponse(BaseModel):
    success: bool = True
    explanation: str
    example: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: datetime
