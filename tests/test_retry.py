import asyncio

import pytest
from fastapi import HTTPException

from pointart_api.core.errors import (
    ConflictError,
    DataAccessError,
    DataAuthError,
    DataQueryError,
    NotFoundError,
    ValidationFailed,
)
from pointart_api.core.retry import retrying, with_retry


class Flaky:
    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or DataAccessError("connection reset")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def _recorder():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return delays, sleep


def test_succeeds_after_two_failures_with_exponential_delays():
    op = Flaky(failures=2)
    delays, sleep = _recorder()
    result = asyncio.run(with_retry(op, max_attempts=3, base_delay=0.5, sleep=sleep))
    assert result == "ok"
    assert op.calls == 3
    assert delays == [0.5, 1.0]


def test_auth_errors_are_not_retried():
    for error in (DataAuthError("denied"), HTTPException(status_code=401)):
        op = Flaky(failures=5, error=error)
        delays, sleep = _recorder()
        with pytest.raises(type(error)):
            asyncio.run(with_retry(op, max_attempts=3, base_delay=1, sleep=sleep))
        assert op.calls == 1
        assert delays == []


def test_last_error_raised_when_attempts_exhausted():
    op = Flaky(failures=10)
    delays, sleep = _recorder()
    with pytest.raises(DataAccessError):
        asyncio.run(with_retry(op, max_attempts=4, base_delay=1, sleep=sleep))
    assert op.calls == 4
    assert delays == [1, 2, 4]


def test_timeout_counts_as_failure():
    calls = []

    async def slow():
        calls.append(1)
        await asyncio.sleep(1)

    _, sleep = _recorder()
    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(with_retry(slow, max_attempts=2, base_delay=0, timeout=0.01, sleep=sleep))
    assert len(calls) == 2


def test_decorator_form():
    op = Flaky(failures=1)

    @retrying(max_attempts=2, base_delay=0)
    async def call():
        return await op()

    assert asyncio.run(call()) == "ok"
    assert op.calls == 2


@pytest.mark.parametrize(
    "error",
    [NotFoundError("missing"), ConflictError("duplicate"), ValidationFailed("bad value"), DataQueryError("syntax")],
)
def test_domain_errors_are_raised_on_first_attempt(error):
    op = Flaky(failures=5, error=error)
    delays, sleep = _recorder()
    with pytest.raises(type(error)):
        asyncio.run(with_retry(op, max_attempts=3, base_delay=1, sleep=sleep))
    assert op.calls == 1
    assert delays == []


def test_unknown_errors_are_treated_as_transient():
    op = Flaky(failures=1, error=ConnectionResetError("peer closed"))
    _, sleep = _recorder()
    assert asyncio.run(with_retry(op, max_attempts=2, base_delay=0, sleep=sleep)) == "ok"
    assert op.calls == 2


def test_before_retry_runs_between_attempts_only():
    op = Flaky(failures=2)
    resets = []

    async def reset():
        resets.append(op.calls)

    _, sleep = _recorder()
    asyncio.run(with_retry(op, max_attempts=3, base_delay=0, before_retry=reset, sleep=sleep))
    assert resets == [1, 2]
