"""Configuration management for the EduAgent tutor backend."""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from models.conversation import MAX_CONTENT_LENGTH

# Load environment variables
load_dotenv()

ENVIRONMENTS = ("development", "production", "test")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Configuration validation failed: {name} must be an integer, got {raw!r}"
        )


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            f"Configuration validation failed: {name} must be a number, got {raw!r}"
        )


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, loaded once at startup and passed explicitly."""
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    environment: str = "development"

    # Server Configuration
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: List[str] = field(
        default_factory=lambda: DEFAULT_CORS_ORIGINS.split(",")
    )

    # Conversation limits
    max_message_length: int = 5000
    max_conversation_history: int = 100

    # Gemini call policy
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    request_timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_output_tokens: int = 2048

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a value is malformed or out of range
        """
        environment = os.getenv("APP_ENV", "development").strip().lower()
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"Configuration validation failed: APP_ENV must be one of "
                f"{', '.join(ENVIRONMENTS)}, got {environment!r}"
            )

        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f"Configuration validation failed: LOG_LEVEL must be one of "
                f"{', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ]

        settings = cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            environment=environment,
            port=_int_env("PORT", 8000),
            log_level=log_level,
            cors_origins=cors_origins,
            max_message_length=_int_env("MAX_MESSAGE_LENGTH", 5000),
            max_conversation_history=_int_env("MAX_CONVERSATION_HISTORY", 100),
            max_retries=_int_env("GEMINI_MAX_RETRIES", 3),
            retry_delay_seconds=_float_env("GEMINI_RETRY_DELAY", 1.0),
            request_timeout_seconds=_float_env("GEMINI_TIMEOUT", 30.0),
            temperature=_float_env("GEMINI_TEMPERATURE", 0.7),
            max_output_tokens=_int_env("GEMINI_MAX_OUTPUT_TOKENS", 2048),
        )

        if settings.max_retries < 1:
            raise ValueError("Configuration validation failed: GEMINI_MAX_RETRIES must be at least 1")
        if settings.max_message_length < 1 or settings.max_conversation_history < 1:
            raise ValueError("Configuration validation failed: limits must be positive")
        # Request schemas and turns cap content at MAX_CONTENT_LENGTH regardless of settings
        if settings.max_message_length > MAX_CONTENT_LENGTH:
            raise ValueError(
                "Configuration validation failed: "
                f"MAX_MESSAGE_LENGTH must not exceed {MAX_CONTENT_LENGTH}"
            )

        return settings

    def validate(self) -> None:
        """Check settings required to serve traffic."""
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"
