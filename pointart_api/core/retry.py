from __future__ import annotations

import asyncio
import functools
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from pointart_api.core.errors import is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")


# PUBLIC_INTERFACE
async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    timeout: Optional[float] = None,
    operation_name: str = "operation",
    before_retry: Optional[Callable[[], Awaitable[None]]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run `operation` with exponential backoff.

    The delay before retry n (1-based) is base_delay * 2**(n-1), so a call that
    fails twice then succeeds waits base_delay + 2*base_delay in total.
    Only transient failures are retried (see core.errors.is_transient):
    authorization failures and client-side domain errors such as NotFoundError,
    ConflictError or ValidationFailed are re-raised on the first attempt.

    Parameters:
        operation: zero-argument coroutine factory; called once per attempt.
        max_attempts: total attempts, including the first one.
        base_delay: seconds to wait after the first failure.
        timeout: optional per-attempt timeout; a timeout counts as a transient failure.
        operation_name: label used in log lines.
        before_retry: awaited after the backoff and before each new attempt,
            e.g. to roll back a session left dirty by the failed one.
        sleep: awaitable sleep function (injectable for tests).
    Returns:
        The first successful result.
    Raises:
        The first non-transient error, or the last error once every attempt has failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            if timeout is not None:
                return await asyncio.wait_for(operation(), timeout=timeout)
            return await operation()
        except Exception as exc:
            if not is_transient(exc):
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s",
                operation_name,
                attempt,
                max_attempts,
                exc or type(exc).__name__,
            )
            if attempt >= max_attempts:
                raise
        await sleep(base_delay * (2 ** (attempt - 1)))
        attempt += 1
        if before_retry is not None:
            await before_retry()


# PUBLIC_INTERFACE
def retrying(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    timeout: Optional[float] = None,
):
    """Decorator form of with_retry for coroutine functions."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await with_retry(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts,
                base_delay=base_delay,
                timeout=timeout,
                operation_name=func.__qualname__,
            )

        return wrapper

    return decorator
