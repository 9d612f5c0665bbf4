"""Bounded retry with typed per-attempt results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar
import asyncio
import logging


T = TypeVar("T")


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    attempt: int
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str:
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"


async def run_attempt(operation: Callable[[], Awaitable[T]], attempt: int) -> AttemptResult[T]:
    try:
        value = await operation()
    except Exception as exc:
        return AttemptResult(attempt=attempt, error=exc)
    return AttemptResult(attempt=attempt, value=value)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: logging.Logger | None = None,
) -> list[AttemptResult[T]]:
    """Run ``operation`` until it succeeds or ``attempts`` are used up.

    Returns every attempt in order; the last one is the success if any
    attempt succeeded. There is no delay after the final attempt.
    """

    if attempts <= 0:
        raise ValueError("attempts must be > 0.")

    _logger = logger or logging.getLogger("formula_assist.llm.retry")
    results: list[AttemptResult[T]] = []

    for attempt in range(1, attempts + 1):
        _logger.debug("attempt_start attempt=%s max_attempts=%s", attempt, attempts)
        result = await run_attempt(operation, attempt)
        results.append(result)
        if result.ok:
            break

        _logger.warning(
            "attempt_failed attempt=%s max_attempts=%s reason=%s",
            attempt,
            attempts,
            result.reason,
        )
        if attempt < attempts:
            await sleep(delay_seconds)

    return results
