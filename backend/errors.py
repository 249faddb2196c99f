"""Application error types for the EduAgent tutor backend."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base error carrying a stable code and HTTP status for the API boundary."""

    code = "INTERNAL_ERROR"
    status_code = 500
    is_operational = True

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the error payload returned to clients."""
        return {
            "error": self.code,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(AppError):
    """Bad or missing input; the caller can fix it and resubmit."""

    code = "VALIDATION_ERROR"
    status_code = 400


class RemoteApiError(AppError):
    """The Gemini call failed non-retryably or after exhausting retries."""

    code = "REMOTE_API_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(f"Remote API error: {message}", details)
        self.original_error = original_error


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404


class InternalError(AppError):
    """Unexpected programming fault. Its message is hidden in production."""

    code = "INTERNAL_ERROR"
    status_code = 500
    is_operational = False
