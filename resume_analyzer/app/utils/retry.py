"""
Retry helper for remote I/O (object storage calls, PDF rendering).

Attempts an operation up to max_attempts times with a growing delay between
attempts. Exceptions listed in non_retryable are re-raised immediately; when
all attempts fail a RetryError carrying the last underlying error is raised.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Literal, TypeVar

from resume_analyzer.app.core.logging_config import get_logger

logger = get_logger("utils.retry")

T = TypeVar("T")
Backoff = Literal["exponential", "linear"]


class RetryError(RuntimeError):
    """Raised after every attempt of a retried operation failed."""

    def __init__(self, message: str, attempts: int, last_error: BaseException | None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


def backoff_delay(attempt: int, base_delay: float, backoff: Backoff = "exponential") -> float:
    """Delay to wait after the given (1-based) failed attempt."""
    if attempt < 1:
        return 0.0
    if backoff == "linear":
        return base_delay * attempt
    return base_delay * (2 ** (attempt - 1))


def retry_call(
    operation: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    backoff: Backoff = "exponential",
    non_retryable: tuple[type[BaseException], ...] = (),
    description: str = "Operation",
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """
    Run operation() with retries.

    Args:
        operation: zero-arg callable doing the remote call
        max_attempts: upper bound on calls (values < 1 are treated as 1)
        base_delay: seconds; scaled by attempt index per backoff
        backoff: "exponential" (base * 2**(n-1)) or "linear" (base * n)
        non_retryable: exception classes re-raised as-is on first occurrence
        description: prefix for log lines and the final error message
        sleep: injectable for tests

    Raises:
        RetryError: all attempts failed; chained from the last error
    """
    attempts = max(1, int(max_attempts))
    last_error: BaseException | None = None

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except non_retryable:
            raise
        except Exception as e:
            last_error = e
            logger.warning(
                "%s attempt %d/%d failed: %s",
                description,
                attempt,
                attempts,
                e,
            )
            if attempt < attempts:
                sleep(backoff_delay(attempt, base_delay, backoff))

    raise RetryError(
        f"{description} failed after {attempts} attempts: {last_error}",
        attempts=attempts,
        last_error=last_error,
    ) from last_error
