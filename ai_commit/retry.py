import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0


def _log_retry(retry_state: RetryCallState) -> None:
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed ({error}), "
        f"retrying in {delay:.2f}s..."
    )


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Awaits ``operation`` up to ``max_attempts`` times.

    After failed attempt n the wait is ``initial_delay * 2 ** (n - 1)``.
    The last attempt's exception is re-raised as is; exceptions outside
    ``retry_on`` are raised immediately.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2, min=0),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    ):
        with attempt:
            return await operation()

    raise AssertionError("unreachable: AsyncRetrying always returns or raises")
