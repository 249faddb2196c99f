"""Split a combined tutor reply into explanation and example sections."""
import logging
import re

from models.responses import ParsedResponse

logger = logging.getLogger(__name__)

EXPLANATION_FALLBACK = (
    "I'm sorry, I couldn't generate a clear explanation for that topic right now. "
    "Please try rephrasing your question."
)
EXAMPLE_FALLBACK = (
    "I'm sorry, I couldn't generate a suitable example for that topic right now."
)


class ResponseParser:
    """
    Extracts "<Explanation>: ..." and "<Example>: ..." sections from model output.

    The explanation runs from its marker to the first example marker after it;
    the example runs from the first example marker to the end of the text.
    A missing or blank section is replaced by a fixed fallback message, so
    parse() always returns both fields.
    """

    def __init__(self, explanation_marker: str = "Explanation", example_marker: str = "Example"):
        if not explanation_marker or not example_marker:
            raise ValueError("Markers must be non-empty")
        if explanation_marker == example_marker:
            raise ValueError("Explanation and example markers must differ")

        self.explanation_marker = explanation_marker
        self.example_marker = example_marker

        example = re.escape(example_marker)
        self._explanation_pattern = re.compile(
            rf"{re.escape(explanation_marker)}:\s*(.*?){example}:", re.DOTALL
        )
        self._example_pattern = re.compile(rf"{example}:\s*(.*)", re.DOTALL)

    def parse(self, raw: str) -> ParsedResponse:
        if not isinstance(raw, str):
            logger.warning(f"Cannot parse non-text response of type {type(raw).__name__}")
            return ParsedResponse(explanation=EXPLANATION_FALLBACK, example=EXAMPLE_FALLBACK)

        explanation = self._extract(self._explanation_pattern, raw)
        example = self._extract(self._example_pattern, raw)

        if explanation is None:
            logger.warning(f"No '{self.explanation_marker}' section found in response")
            explanation = EXPLANATION_FALLBACK
        if example is None:
            logger.warning(f"No '{self.example_marker}' section found in response")
            example = EXAMPLE_FALLBACK

        return ParsedResponse(explanation=explanation, example=example)

    @staticmethod
    def _extract(pattern, raw: str):
        match = pattern.search(raw)
        if not match:
            return None
        text = match.group(1).strip()
        return text or None
