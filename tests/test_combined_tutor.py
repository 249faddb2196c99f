"""Unit tests for CombinedTutor."""
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import pytest
from unittest.mock import Mock
from errors import RemoteApiError, ValidationError
from models.conversation import Conversation, Role, Turn
from services.combined_tutor import CombinedTutor
from services.response_parser import EXAMPLE_FALLBACK, ResponseParser


class TestCombinedTutor:
    """Test suite for CombinedTutor class."""

    def test_build_prompt_uses_markers(self):
        """Test the combined prompt names both section markers."""
        prompt = CombinedTutor.build_prompt("photosynthesis")

        assert 'teach the user about "photosynthesis"' in prompt
        assert "Explanation: [Your detailed explanation here]" in prompt
        assert "Example: [Your clear, real-world example here]" in prompt

    def test_answer_parses_combined_reply(self):
        """Test answer makes one call and splits the reply."""
        client = Mock()
        client.generate.return_value = "Explanation: Plants make sugar.\nExample: A leaf in sunlight."
        prior = Turn(role=Role.USER, content="Earlier")
        conversation = Conversation([prior])

        result = CombinedTutor(client).answer("photosynthesis", conversation)

        assert result.explanation == "Plants make sugar."
        assert result.example == "A leaf in sunlight."
        prompt, history = client.generate.call_args.args
        assert '"photosynthesis"' in prompt
        assert tuple(history) == (prior,)
        assert len(conversation) == 2

    def test_answer_with_custom_parser_markers(self):
        """Test the prompt follows the parser's markers."""
        client = Mock()
        client.generate.return_value = "Explainer: idea\nIllustration: picture"
        parser = ResponseParser(explanation_marker="Explainer", example_marker="Illustration")

        result = CombinedTutor(client, parser).answer("optics", Conversation())

        assert result.explanation == "idea"
        assert "Illustration: [Your clear" in client.generate.call_args.args[0]

    def test_answer_degrades_to_fallback(self):
        """Test an unstructured reply degrades to fallback sections."""
        client = Mock()
        client.generate.return_value = "Explanation: only this"

        result = CombinedTutor(client).answer("optics", Conversation())

        assert result.example == EXAMPLE_FALLBACK

    def test_answer_rejects_empty_query(self):
        """Test an empty query fails before any remote call."""
        client = Mock()

        with pytest.raises(ValidationError):
            CombinedTutor(client).answer("   ", Conversation())

        client.generate.assert_not_called()

    def test_answer_propagates_remote_errors(self):
        """Test remote failures are raised to the caller."""
        client = Mock()
        client.generate.side_effect = RemoteApiError("quota exceeded")

        with pytest.raises(RemoteApiError):
            CombinedTutor(client).answer("optics", Conversation())
