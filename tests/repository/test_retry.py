"""Tests for schema_sync.repository.retry."""

import pytest

from schema_sync.repository.retrieval_errors import RetrievalQueryError
from schema_sync.repository.retry import retry_async


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or RetrievalQueryError("transient")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.asyncio
async def test_success_first_try_does_not_sleep(sleep_recorder):
    operation = FlakyOperation(failures=0)

    assert await retry_async(operation, sleep=sleep_recorder) == "ok"
    assert operation.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_exponential_backoff_between_failures(sleep_recorder):
    operation = FlakyOperation(failures=2)

    result = await retry_async(operation, max_attempts=3, base_delay=0.5, sleep=sleep_recorder)

    assert result == "ok"
    assert operation.calls == 3
    assert sleep_recorder.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_final_failure_is_raised_without_sleep(sleep_recorder):
    operation = FlakyOperation(failures=5)

    with pytest.raises(RetrievalQueryError, match="transient"):
        await retry_async(operation, max_attempts=3, base_delay=1, sleep=sleep_recorder)

    assert operation.calls == 3
    assert sleep_recorder.delays == [1, 2]


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps(sleep_recorder):
    operation = FlakyOperation(failures=1)

    with pytest.raises(RetrievalQueryError):
        await retry_async(operation, max_attempts=1, sleep=sleep_recorder)

    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(sleep_recorder):
    operation = FlakyOperation(failures=1, error=KeyError("bug"))

    with pytest.raises(KeyError):
        await retry_async(operation, retry_on=(RetrievalQueryError,), sleep=sleep_recorder)

    assert operation.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_invalid_max_attempts(sleep_recorder):
    with pytest.raises(ValueError, match="max_attempts"):
        await retry_async(FlakyOperation(0), max_attempts=0, sleep=sleep_recorder)
