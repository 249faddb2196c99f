"""Single-call tutor: one prompt asks for both sections, the reply is split locally."""
import logging

from models.conversation import Conversation
from models.responses import ParsedResponse
from services.persona_orchestrator import MAX_QUERY_LENGTH, append_user_turn, validate_query
from services.response_parser import ResponseParser

logger = logging.getLogger(__name__)


class CombinedTutor:
    """Legacy path that asks Gemini to play both personas in one reply."""

    def __init__(self, client, parser: ResponseParser = None, max_query_length: int = MAX_QUERY_LENGTH):
        self.client = client
        self.parser = parser or ResponseParser()
        self.max_query_length = max_query_length

    def answer(self, query: str, conversation: Conversation) -> ParsedResponse:
        """
        Ask for an explanation and an example in a single Gemini call.

        Raises:
            ValidationError: If the query is invalid or the conversation is full
            RemoteApiError: If the Gemini call fails
        """
        content = validate_query(query, self.max_query_length)
        append_user_turn(conversation, content)

        prompt = self.build_prompt(
            content,
            self.parser.explanation_marker,
            self.parser.example_marker
        )
        raw = self.client.generate(prompt, conversation.turns[:-1])
        logger.debug(f"Combined response received: {raw[:200]}")

        return self.parser.parse(raw)

    @staticmethod
    def build_prompt(query: str, explanation_marker: str = "Explanation", example_marker: str = "Example") -> str:
        return f"""You are two collaborative AI tutors: an "Explainer Agent" and an "Example Provider Agent".
Your goal is to teach the user about "{query}".

**Explainer Agent**: Your role is to provide a clear, concise, and easy-to-understand explanation of the concept. Focus on the core principles and definitions.
**Example Provider Agent**: Your role is to provide a simple, relatable, real-world example that illustrates the concept explained by the Explainer Agent. The example should make the abstract concept concrete.

Please provide your responses in the following structured format, with no additional text outside these tags:
{explanation_marker}: [Your detailed explanation here]
{example_marker}: [Your clear, real-world example here]"""
