"""Gemini client with retry and non-retryable error classification."""
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai

from errors import RemoteApiError
from models.conversation import Turn, to_remote_format

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

# Substrings (lower-case) of provider errors that retrying will not fix
NON_RETRYABLE_PATTERNS = (
    "api key",
    "authentication",
    "unauthorized",
    "quota",
    "billing",
    "invalid",
)


class GeminiClient:
    """Client for generating text with the Google Gemini API."""

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_output_tokens: int = 2048
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to call
            max_retries: Total attempts per generate() call
            retry_delay: Base delay in seconds; attempt N waits N * retry_delay
            timeout: Per-attempt request timeout in seconds
        """
        if not api_key:
            raise ValueError("GEMINI_API_KEY must be provided")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.api_key = api_key
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name,
            generation_config={
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            },
        )
        logger.info(f"GeminiClient initialized with model {model_name}")

    @classmethod
    def from_settings(cls, settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay_seconds,
            timeout=settings.request_timeout_seconds,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )

    def generate(self, prompt: str, history: Sequence[Turn] = ()) -> str:
        """
        Generate text for a prompt, replaying prior turns as context.

        Args:
            prompt: Prompt for the current turn
            history: Prior turns, oldest first

        Returns:
            Generated text

        Raises:
            RemoteApiError: On a non-retryable failure, or after max_retries attempts
        """
        contents = self.build_contents(prompt, history)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            start_time = time.time()
            try:
                logger.debug(
                    f"Calling Gemini API: model={self.model_name}, attempt={attempt}, "
                    f"prompt_length={len(prompt)}, history_turns={len(history)}"
                )

                text = self._call(contents)

                latency_ms = int((time.time() - start_time) * 1000)
                logger.info(
                    f"Generated response: model={self.model_name}, attempt={attempt}, "
                    f"response_length={len(text)}, latency={latency_ms}ms"
                )
                return text

            # The SDK surfaces transport, HTTP and parsing failures as unrelated exception types
            except Exception as e:
                last_error = e
                latency_ms = int((time.time() - start_time) * 1000)
                details = {
                    "model": self.model_name,
                    "attempt": attempt,
                    "latency_ms": latency_ms,
                    "original_error": str(e),
                    "error_type": type(e).__name__,
                }

                if self.is_non_retryable(e):
                    details["retryable"] = False
                    logger.error(
                        f"Non-retryable Gemini error: model={self.model_name}, "
                        f"attempt={attempt}, error={e}",
                        exc_info=True,
                        extra={"error_details": details}
                    )
                    raise RemoteApiError(
                        f"Non-retryable error: {e}",
                        original_error=e,
                        details=details
                    ) from e

                will_retry = attempt < self.max_retries
                logger.warning(
                    f"Gemini API call failed: model={self.model_name}, attempt={attempt}, "
                    f"latency={latency_ms}ms, will_retry={will_retry}, error={e}"
                )
                if will_retry:
                    time.sleep(self.retry_delay * attempt)

        details = {
            "model": self.model_name,
            "attempts": self.max_retries,
            "original_error": str(last_error),
            "error_type": type(last_error).__name__,
            "retryable": True,
        }
        logger.error(
            f"Gemini API failed after {self.max_retries} attempts: {last_error}",
            extra={"error_details": details}
        )
        raise RemoteApiError(
            f"Failed to generate response after {self.max_retries} attempts: {last_error}",
            original_error=last_error,
            details=details
        ) from last_error

    def _call(self, contents: List[Dict[str, Any]]) -> str:
        response = self.model.generate_content(
            contents,
            request_options={"timeout": self.timeout},
        )
        text = response.text
        if not text or not text.strip():
            raise ValueError("Gemini returned an empty response")
        return text

    @staticmethod
    def build_contents(prompt: str, history: Sequence[Turn] = ()) -> List[Dict[str, Any]]:
        """
        Build Gemini `contents`: prior turns followed by the prompt as a user turn.

        Persona tags are dropped here; Gemini only sees 'user' and 'model'.
        """
        contents = [
            {"role": item["role"], "parts": [{"text": item["content"]}]}
            for item in to_remote_format(history)
        ]
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        return contents

    @staticmethod
    def is_non_retryable(error: BaseException) -> bool:
        message = str(error).lower()
        return any(pattern in message for pattern in NON_RETRYABLE_PATTERNS)
