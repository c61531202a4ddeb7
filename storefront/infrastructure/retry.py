"""Retry policies for persistence races."""

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.domain.exceptions import ConcurrencyConflictError

logger = structlog.get_logger()


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "Retrying after concurrency conflict",
        attempt=retry_state.attempt_number,
        error=str(exc) if exc else None,
    )


def conflict_retry(attempts: int) -> AsyncRetrying:
    """Retry policy for operations that lost a uniqueness race.

    Each attempt must run in a fresh unit of work.

    Args:
        attempts: Total number of attempts, including the first.

    Returns:
        AsyncRetrying iterator re-raising the last conflict.
    """
    return AsyncRetrying(
        reraise=True,
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=0.02, min=0.02, max=0.5),
        retry=retry_if_exception_type(ConcurrencyConflictError),
        before_sleep=_log_retry,
    )
