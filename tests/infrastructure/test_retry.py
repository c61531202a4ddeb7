"""Tests for the concurrency conflict retry policy."""

import pytest

from storefront.domain.exceptions import ConcurrencyConflictError, ValidationError
from storefront.infrastructure.retry import conflict_retry


async def run_with_retry(attempts: int, outcomes: list[Exception | None]) -> int:
    """Run an operation failing with the given outcomes; return the attempt count."""
    calls = 0
    async for attempt in conflict_retry(attempts):
        with attempt:
            outcome = outcomes[calls]
            calls += 1
            if outcome is not None:
                raise outcome
    return calls


class TestConflictRetry:
    """Tests for conflict_retry."""

    async def test_retries_conflict_then_succeeds(self) -> None:
        conflict = ConcurrencyConflictError("cart", "duplicate key")
        assert await run_with_retry(3, [conflict, None]) == 2

    async def test_reraises_after_last_attempt(self) -> None:
        """The final conflict reaches the caller unchanged."""
        conflicts = [ConcurrencyConflictError("cart", f"attempt {i}") for i in range(2)]

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await run_with_retry(2, conflicts)
        assert "attempt 1" in exc_info.value.message

    async def test_other_errors_not_retried(self) -> None:
        with pytest.raises(ValidationError):
            await run_with_retry(3, [ValidationError("bad input"), None])

    async def test_single_attempt(self) -> None:
        with pytest.raises(ConcurrencyConflictError):
            await run_with_retry(1, [ConcurrencyConflictError("cart", "duplicate key"), None])
