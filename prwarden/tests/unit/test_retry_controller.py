import pytest
from unittest.mock import MagicMock

from prwarden.review.errors import (
    AIServiceError,
    ErrorKind,
    RemoteFatalError,
    RemoteRetryableExhaustedError,
)
from prwarden.review.retry import RetryController, backoff_delay, is_retryable


def overloaded():
    return AIServiceError("503 model overloaded", status_code=503, retryable=True)


def test_backoff_delay_doubles_per_attempt():
    assert [backoff_delay(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 16.0]
    assert backoff_delay(3, 0.25) == 8.25


def test_is_retryable_only_for_flagged_service_errors():
    assert is_retryable(overloaded())
    assert not is_retryable(AIServiceError("bad request", status_code=400))
    assert not is_retryable(RuntimeError("boom"))


def test_returns_first_success_without_sleeping(no_sleep_retry):
    operation = MagicMock(return_value="ok")

    assert no_sleep_retry.run(operation) == "ok"
    operation.assert_called_once()
    assert no_sleep_retry.sleeps == []


def test_retries_overload_then_succeeds(no_sleep_retry):
    operation = MagicMock(side_effect=[overloaded(), overloaded(), "ok"])

    assert no_sleep_retry.run(operation) == "ok"
    assert operation.call_count == 3
    assert no_sleep_retry.sleeps == [2.5, 4.5]


def test_fatal_error_stops_immediately(no_sleep_retry):
    cause = AIServiceError("invalid api key", status_code=401)
    operation = MagicMock(side_effect=cause)

    with pytest.raises(RemoteFatalError) as excinfo:
        no_sleep_retry.run(operation, description="code review generation")

    assert excinfo.value.kind == ErrorKind.REMOTE_FATAL
    assert excinfo.value.attempts == 1
    assert excinfo.value.cause is cause
    assert no_sleep_retry.sleeps == []


def test_exhaustion_after_max_attempts(no_sleep_retry):
    operation = MagicMock(side_effect=[overloaded() for _ in range(5)])

    with pytest.raises(RemoteRetryableExhaustedError) as excinfo:
        no_sleep_retry.run(operation)

    assert excinfo.value.kind == ErrorKind.REMOTE_RETRYABLE_EXHAUSTED
    assert excinfo.value.attempts == 5
    assert operation.call_count == 5
    # No wait after the final attempt
    assert no_sleep_retry.sleeps == [2.5, 4.5, 8.5, 16.5]


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        RetryController(max_attempts=0)
