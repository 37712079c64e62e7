from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, ParamSpec, TypeVar


T = TypeVar("T")
P = ParamSpec("P")

BASE_DELAY_S = 1.0
MAX_JITTER_S = 0.5
MAX_DELAY_S = 30.0

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(
    attempt: int,
    *,
    base_s: float = BASE_DELAY_S,
    jitter_s: float = MAX_JITTER_S,
    cap_s: float = MAX_DELAY_S,
    rng: random.Random | None = None,
) -> float:
    """Exponential backoff with additive jitter, in seconds.

    attempt 0 -> 1s, attempt 1 -> 2s, attempt 2 -> 4s ... plus up to
    ``jitter_s`` of random jitter, never more than ``cap_s``.
    """
    uniform = (rng or random).uniform
    delay = base_s * (2 ** max(0, attempt)) + uniform(0, jitter_s)
    return min(delay, cap_s)


async def retry_async(
    func: Callable[P, Awaitable[T]],
    *args: P.args,
    attempts: int = 3,
    is_retryable: Callable[[Exception], bool] | None = None,
    delay_for: Callable[[int, Exception], float] | None = None,
    on_retry: Callable[[int, float, Exception], None] | None = None,
    sleep: Sleep = asyncio.sleep,
    **kwargs: P.kwargs,
) -> T:
    """Retry an async function, sleeping between attempts.

    Args:
        func: async callable to invoke
        attempts: max attempts (>=1). Total tries equals attempts.
        is_retryable: predicate deciding whether an exception is worth another try
        delay_for: seconds to sleep given (attempt index starting at 0, exception);
            defaults to ``backoff_delay``
        on_retry: callback invoked before each sleep with (attempt index starting at 1, delay_s, exception)
        sleep: awaitable sleep, injectable for tests

    Returns:
        Result of func on success

    Raises:
        Propagates the last exception when attempts are exhausted or it is not retryable.
        Cancellation is never retried.
    """

    if attempts < 1:
        attempts = 1

    last_exc: Exception | None = None
    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            last_exc = exc
            retry = is_retryable(exc) if is_retryable is not None else True
            if attempt + 1 >= attempts or not retry:
                raise

            delay_s = delay_for(attempt, exc) if delay_for is not None else backoff_delay(attempt)

            if on_retry is not None:
                on_retry(attempt + 1, delay_s, exc)

            await sleep(delay_s)

    # Should be unreachable
    assert last_exc is not None
    raise last_exc
