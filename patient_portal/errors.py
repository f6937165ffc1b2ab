"""Error type raised by the portal client plus helpers for presenting it.

Messages passed through these helpers are scrubbed of anything that looks like
patient identifying data before they are shown or logged.
"""
from __future__ import annotations
import logging
import re
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)

NETWORK_ERROR = "NETWORK_ERROR"
TIMEOUT = "TIMEOUT"
INVALID_RESPONSE = "INVALID_RESPONSE"

MAX_RETRY_DELAY = 30.0


class ApiError(Exception):
    """A failed portal request. ``status`` is 0 when no usable HTTP response was received."""

    def __init__(self, message: str, status: int, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status={self.status}, code={self.code!r})"


class ErrorInfo(BaseModel):
    message: str
    status: Optional[int] = None
    code: Optional[str] = None
    user_friendly: str
    retryable: bool = False


_PHI_PATTERNS = [
    (re.compile(r"patient\s+id:?\s*\w+", re.IGNORECASE), "[Patient ID]"),
    (re.compile(r"email:?\s*[\w.@-]+", re.IGNORECASE), "[Email]"),
    (re.compile(r"name:?\s*[\w\s]+", re.IGNORECASE), "[Name]"),
    (re.compile(r"\b\d{3}-\d{2}-\d{4}\b"), "[SSN]"),
]

_FRIENDLY_BY_STATUS = {
    400: "Invalid request. Please check your input and try again.",
    401: "Authentication failed. Please check your credentials and try again.",
    403: "You don't have permission to access this resource.",
    404: "The requested resource was not found.",
    500: "A server error occurred. Please try again later.",
    502: "Service temporarily unavailable. Please try again later.",
    503: "Service temporarily unavailable. Please try again later.",
}


def sanitize_error_message(message: str) -> str:
    for pattern, replacement in _PHI_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def get_user_friendly_error(error: BaseException | None) -> ErrorInfo:
    """Map any exception to a displayable, sanitized :class:`ErrorInfo`."""
    if isinstance(error, ApiError):
        return ErrorInfo(
            message=sanitize_error_message(error.message),
            status=error.status,
            code=error.code,
            user_friendly=_FRIENDLY_BY_STATUS.get(error.status, "An error occurred. Please try again."),
            retryable=error.status >= 500 or error.status == 0,
        )
    if isinstance(error, Exception):
        return ErrorInfo(
            message=sanitize_error_message(str(error)),
            user_friendly="An unexpected error occurred. Please try again.",
            retryable=True,
        )
    return ErrorInfo(
        message="Unknown error",
        user_friendly="An unexpected error occurred. Please try again.",
        retryable=True,
    )


def log_error(error: BaseException | None, context: str | None = None) -> None:
    info = get_user_friendly_error(error)
    where = f" in {context}" if context else ""
    logger.error(
        "[Error%s] message=%s status=%s code=%s", where, info.message, info.status, info.code
    )


def is_retryable_error(error: BaseException | None) -> bool:
    return get_user_friendly_error(error).retryable


def get_retry_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Exponential backoff in seconds, capped at 30."""
    return min(base_delay * (2 ** attempt), MAX_RETRY_DELAY)
