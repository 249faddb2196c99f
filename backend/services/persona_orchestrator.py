"""Multi-persona orchestration: one Gemini call per tutor persona."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Sequence

from errors import RemoteApiError, ValidationError
from models.conversation import Conversation, ConversationLimitError, Persona, Role, Turn
from models.responses import GeneratedResponse

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 5000


def validate_query(query, max_length: int = MAX_QUERY_LENGTH) -> str:
    """
    Validate a learner's query and return it trimmed.

    Raises:
        ValidationError: If the query is not text or its trimmed length is outside 1..max_length
    """
    if not isinstance(query, str):
        raise ValidationError("Invalid request: message is required and must be a string")

    trimmed = query.strip()
    if not trimmed:
        raise ValidationError("Invalid request: message cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(
            f"Invalid request: message exceeds maximum length of {max_length} characters"
        )
    return trimmed


def append_user_turn(conversation: Conversation, content: str) -> Turn:
    """Append the query as a user turn, mapping turn and capacity errors to ValidationError."""
    try:
        turn = Turn(role=Role.USER, content=content)
        conversation.append(turn)
    except (ConversationLimitError, ValueError) as e:
        raise ValidationError(str(e))
    return turn


class PersonaOrchestrator:
    """Generates one response per persona for a learner's question."""

    PERSONAS = (Persona.EXPLAINER, Persona.EXAMPLE_PROVIDER)

    def __init__(self, client, max_query_length: int = MAX_QUERY_LENGTH):
        """
        Args:
            client: Object exposing generate(prompt, history) -> str
            max_query_length: Upper bound on the trimmed query length
        """
        self.client = client
        self.max_query_length = max_query_length

    def execute(self, query: str, conversation: Conversation) -> List[GeneratedResponse]:
        """
        Answer a query with every persona.

        The query is appended to `conversation` as a user turn. Persona calls
        run concurrently; the result always follows PERSONAS order. A persona
        whose call raises anything is logged and left out.

        Returns:
            Responses from the personas that succeeded, in PERSONAS order

        Raises:
            ValidationError: If the query is invalid or the conversation is full
            RemoteApiError: If every persona failed
        """
        content = validate_query(query, self.max_query_length)
        append_user_turn(conversation, content)

        # The new question is embedded in each prompt, so it is left out of the history
        history = conversation.turns[:-1]

        with ThreadPoolExecutor(max_workers=len(self.PERSONAS)) as executor:
            futures = [
                (persona, executor.submit(self._generate, persona, conversation, content, history))
                for persona in self.PERSONAS
            ]

        responses: List[GeneratedResponse] = []
        failures: Dict[Persona, Exception] = {}
        for persona, future in futures:
            try:
                responses.append(future.result())
            # One persona failing for any reason must not discard the other's answer
            except Exception as e:
                failures[persona] = e
                logger.error(
                    f"Failed to generate {persona.label} response: {e}",
                    exc_info=e,
                    extra={
                        "persona": persona.value,
                        "error_type": type(e).__name__,
                        "error_details": getattr(e, "details", {}),
                    }
                )

        if not responses:
            raise RemoteApiError(
                "Failed to generate responses from all agents",
                original_error=failures[self.PERSONAS[-1]],
                details={
                    persona.value: getattr(error, "message", str(error))
                    for persona, error in failures.items()
                }
            )

        logger.info(
            f"Generated {len(responses)}/{len(self.PERSONAS)} persona responses",
            extra={"failed_personas": [persona.value for persona in failures]}
        )
        return responses

    def _generate(
        self,
        persona: Persona,
        conversation: Conversation,
        content: str,
        history: Sequence[Turn]
    ) -> GeneratedResponse:
        prompt = self.build_prompt(persona, content, conversation.subject, conversation.topic)
        text = self.client.generate(prompt, history)
        return GeneratedResponse(text=text, persona=persona)

    @staticmethod
    def build_prompt(persona: Persona, question: str, subject: str = None, topic: str = None) -> str:
        """
        Build a persona prompt: the persona's instruction followed by the question.

        Subject and topic, when present, go on one context line between them.
        """
        context = [
            f"{name}: {value}"
            for name, value in (("Subject", subject), ("Topic", topic))
            if value
        ]
        context_section = f"{', '.join(context)}\n\n" if context else ""
        return f"{persona.instruction}\n\n{context_section}User's question: {question}"
