"""Bounded retry policy shared by every network-facing call."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, TypeVar

import structlog

from allocation_migrator.exceptions import ServiceUnavailableError

if TYPE_CHECKING:
    from allocation_migrator.config import Settings

_logger = structlog.get_logger("RetryPolicy")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Max attempts plus a fixed or exponential delay between attempts.

    Only errors matching ``retry_on`` are retried; anything else propagates
    on the first attempt.
    """

    max_attempts: int = 3
    delay_seconds: float = 1.0
    backoff: Literal["fixed", "exponential"] = "fixed"
    max_delay_seconds: float = 30.0
    retry_on: tuple[type[BaseException], ...] = (ServiceUnavailableError,)
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, repr=False, compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        r = settings.retry
        return cls(
            max_attempts=r.max_attempts,
            delay_seconds=r.delay_seconds,
            backoff=r.backoff,
            max_delay_seconds=r.max_delay_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        if self.backoff == "exponential":
            delay = self.delay_seconds * (2 ** max(0, attempt - 1))
        else:
            delay = self.delay_seconds
        return min(delay, self.max_delay_seconds)

    async def wait(self, attempt: int) -> None:
        """Sleep for delay_for(attempt)."""
        delay = self.delay_for(attempt)
        if delay > 0:
            await self.sleep(delay)

    async def run(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Await fn() until it succeeds, raises a non-retryable error, or attempts run out.

        Args:
            operation: Name used in log events (e.g. "fetch_rows").
            fn: Zero-argument coroutine factory; called once per attempt.

        Returns:
            The result of the first successful attempt.

        Raises:
            The last retryable error once max_attempts is reached, or any
            non-retryable error immediately.
        """
        attempt = 1
        while True:
            try:
                return await fn()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    _logger.warning(
                        "retry_exhausted",
                        retry_operation=operation,
                        retry_attempts=attempt,
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                    raise
                _logger.info(
                    "retry_scheduled",
                    retry_operation=operation,
                    retry_attempt=attempt,
                    retry_delay_seconds=self.delay_for(attempt),
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                await self.wait(attempt)
                attempt += 1
