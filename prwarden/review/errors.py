"""
Error kinds raised by the review engine.

Callers branch on ``ErrorKind`` (or the exception class), never on message text.
"""

import enum
from typing import Optional


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    REMOTE_FATAL = "remote_fatal"
    REMOTE_RETRYABLE_EXHAUSTED = "remote_retryable_exhausted"
    PARSE_DEGRADED = "parse_degraded"


class ReviewError(Exception):
    """Base class for every error the review engine surfaces."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ReviewError):
    kind = ErrorKind.NOT_FOUND


class InvalidStateError(ReviewError):
    kind = ErrorKind.INVALID_STATE


class GenerationError(ReviewError):
    """Generation gave up; carries the attempt count and the last cause."""

    def __init__(self, message: str, attempts: int, cause: Optional[BaseException]):
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


class RemoteFatalError(GenerationError):
    kind = ErrorKind.REMOTE_FATAL


class RemoteRetryableExhaustedError(GenerationError):
    kind = ErrorKind.REMOTE_RETRYABLE_EXHAUSTED


class AIServiceError(Exception):
    """Raised by generation clients. ``retryable`` marks transient overload."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, retryable: bool = False
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class GitHubError(Exception):
    """Raised by the GitHub client when a request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
