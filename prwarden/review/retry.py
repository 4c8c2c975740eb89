import random as _random
import time
from typing import Callable, Optional, TypeVar

from prwarden.review.errors import (
    AIServiceError,
    RemoteFatalError,
    RemoteRetryableExhaustedError,
)
from prwarden.utils.logger import logger

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5


def backoff_delay(attempt: int, jitter: float = 0.0) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    return float(2**attempt) + jitter


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, AIServiceError) and error.retryable


class RetryController:
    """Runs an idempotent operation with bounded exponential backoff."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
        random: Callable[[], float] = _random.random,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.random = random

    def run(self, operation: Callable[[], T], description: str = "operation") -> T:
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except Exception as e:
                last_error = e
                if not is_retryable(e):
                    logger.error(
                        f"{description} failed with a non-retryable error on attempt {attempt}: {e}"
                    )
                    raise RemoteFatalError(
                        f"Failed to complete {description} after {attempt} attempt(s): {e}",
                        attempts=attempt,
                        cause=e,
                    ) from e

                if attempt == self.max_attempts:
                    break

                wait = backoff_delay(attempt, self.random())
                logger.warning(
                    f"{description} overloaded (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {wait:.2f}s: {e}"
                )
                self.sleep(wait)

        logger.error(
            f"{description} still overloaded after {self.max_attempts} attempts: {last_error}"
        )
        raise RemoteRetryableExhaustedError(
            f"Failed to complete {description} after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
            cause=last_error,
        ) from last_error
