"""Unit tests for ResponseParser."""
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import pytest
from models.responses import ParsedResponse
from services.response_parser import EXAMPLE_FALLBACK, EXPLANATION_FALLBACK, ResponseParser


class TestResponseParser:
    """Test suite for ResponseParser class."""

    @pytest.fixture
    def parser(self):
        return ResponseParser()

    def test_parse_both_sections(self, parser):
        """Test parsing a reply with both sections."""
        result = parser.parse("Explanation: X\nExample: Y")
        assert result == ParsedResponse(explanation="X", example="Y")

    def test_parse_example_only(self, parser):
        """Test a missing explanation falls back to the default text."""
        result = parser.parse("Example: Y only")

        assert result.explanation == EXPLANATION_FALLBACK
        assert result.example == "Y only"

    def test_parse_explanation_only(self, parser):
        """Test a missing example falls back to the default text."""
        result = parser.parse("Explanation: just an explanation")

        assert result.explanation == EXPLANATION_FALLBACK
        assert result.example == EXAMPLE_FALLBACK

    def test_parse_no_markers(self, parser):
        """Test a reply without markers uses both fallbacks."""
        result = parser.parse("The model ignored the format entirely.")
        assert result == ParsedResponse(explanation=EXPLANATION_FALLBACK, example=EXAMPLE_FALLBACK)

    def test_parse_multiline_sections(self, parser):
        """Test sections spanning several lines are kept whole."""
        raw = (
            "Explanation: Friction opposes motion.\n"
            "It depends on the surfaces in contact.\n"
            "Example: Brakes on a bicycle.\n"
            "Rubbing your hands warms them."
        )

        result = parser.parse(raw)

        assert result.explanation == "Friction opposes motion.\nIt depends on the surfaces in contact."
        assert result.example == "Brakes on a bicycle.\nRubbing your hands warms them."

    def test_explanation_stops_at_first_example_marker(self, parser):
        """Test the explanation ends at the first example marker."""
        result = parser.parse("Explanation: A\nExample: B\nExample: C")

        assert result.explanation == "A"
        assert result.example == "B\nExample: C"

    def test_blank_sections_use_fallbacks(self, parser):
        """Test sections that are present but blank use fallbacks."""
        result = parser.parse("Explanation:   \nExample:   ")

        assert result.explanation == EXPLANATION_FALLBACK
        assert result.example == EXAMPLE_FALLBACK

    def test_non_string_input_uses_fallbacks(self, parser):
        """Test non-text input yields both fallbacks."""
        result = parser.parse(None)
        assert result == ParsedResponse(explanation=EXPLANATION_FALLBACK, example=EXAMPLE_FALLBACK)

    def test_custom_markers(self):
        """Test parsing with custom section markers."""
        parser = ResponseParser(explanation_marker="Explainer", example_marker="Illustration")

        result = parser.parse("Explainer: the idea\nIllustration: a picture")

        assert result == ParsedResponse(explanation="the idea", example="a picture")

    def test_markers_are_escaped(self):
        """Test regex characters in markers are matched literally."""
        parser = ResponseParser(explanation_marker="Why (short)", example_marker="E.g.")

        result = parser.parse("Why (short): because\nE.g.: this")

        assert result == ParsedResponse(explanation="because", example="this")

    def test_identical_markers_rejected(self):
        """Test the two markers must differ."""
        with pytest.raises(ValueError):
            ResponseParser(explanation_marker="Example", example_marker="Example")
