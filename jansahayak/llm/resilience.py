"""
Timeout and bounded-retry wrapper for slow external calls.

Collaborator calls are blocking; they run in the event loop's default
executor under `asyncio.wait_for`. A timed-out call keeps running in its
worker thread but its result is discarded. Only TransientDependencyError
is retried; validation and not-found failures propagate immediately.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import TransientDependencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff_base: float = 0.5   # seconds, first back-off delay
    backoff_max: float = 4.0


async def call_with_resilience(
    fn: Callable[..., T],
    *args: Any,
    timeout: float,
    policy: RetryPolicy = RetryPolicy(),
    operation: str = "external call",
    **kwargs: Any,
) -> T:
    """Run `fn(*args, **kwargs)` off the event loop with timeout and retry.

    Args:
        fn: Blocking callable (store I/O, generation, embedding, ...).
        timeout: Per-attempt timeout in seconds.
        policy: Attempt budget and exponential back-off.
        operation: Name used in log messages.

    Returns:
        Whatever `fn` returns.

    Raises:
        TransientDependencyError: after the attempt budget is exhausted.
        Any non-transient exception raised by `fn`, unchanged.
    """
    loop = asyncio.get_running_loop()
    call = functools.partial(fn, *args, **kwargs)
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.backoff_base, max=policy.backoff_max),
        retry=retry_if_exception_type(TransientDependencyError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    result = None
    async for attempt in retrying:
        with attempt:
            try:
                result = await asyncio.wait_for(loop.run_in_executor(None, call), timeout)
            except asyncio.TimeoutError as exc:
                raise TransientDependencyError(f"{operation} timed out after {timeout:.1f}s") from exc
    return result
