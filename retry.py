"""Linear-backoff retry helper for API lookups."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

from semantic_scholar import LookupFailure

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 2.0

LOGGER = logging.getLogger(__name__)


def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = LookupFailure,
    **kwargs: Any,
) -> T:
    """Call ``func`` until it returns, retrying only on ``retry_on`` errors.

    The wait after attempt ``n`` is ``n * backoff_seconds``. Once
    ``max_attempts`` calls have failed the last error is re-raised; any other
    exception propagates on the first occurrence.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        before_sleep=_log_before_retry(max_attempts),
        reraise=True,
    )
    return retrying(func, *args, **kwargs)


def _log_before_retry(max_attempts: int) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait_seconds = retry_state.next_action.sleep if retry_state.next_action else 0
        LOGGER.warning(
            "  Error: %s, retrying in %ss... (%s left)",
            error,
            wait_seconds,
            max_attempts - retry_state.attempt_number,
        )

    return log
