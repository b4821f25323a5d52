# -*- coding: utf-8 -*-
"""Unit tests for RetryPolicy."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ServiceAPIError, ServiceUnavailableError
from allocation_migrator.utils.retry import RetryPolicy


def test_fixed_delay() -> None:
    policy = RetryPolicy(delay_seconds=1.5)
    assert [policy.delay_for(a) for a in (1, 2, 3)] == [1.5, 1.5, 1.5]


def test_exponential_delay_is_capped() -> None:
    policy = RetryPolicy(delay_seconds=1.0, backoff="exponential", max_delay_seconds=5.0)
    assert [policy.delay_for(a) for a in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]


def test_from_settings(settings_factory: Callable[..., Settings]) -> None:
    policy = RetryPolicy.from_settings(
        settings_factory(retry={"max_attempts": 5, "delay_seconds": 0.5, "backoff": "exponential"})
    )
    assert policy.max_attempts == 5
    assert policy.delay_seconds == 0.5
    assert policy.backoff == "exponential"


async def test_run_returns_first_success(no_sleep_retry: Callable[..., RetryPolicy]) -> None:
    sleeps: list[float] = []
    fn = AsyncMock(side_effect=[ServiceUnavailableError("a"), ServiceUnavailableError("b"), "ok"])

    assert await no_sleep_retry(max_attempts=3, sleeps=sleeps).run("op", fn) == "ok"
    assert fn.await_count == 3
    assert sleeps == [1.0, 1.0]


async def test_run_reraises_last_error_when_exhausted(
    no_sleep_retry: Callable[..., RetryPolicy],
) -> None:
    fn = AsyncMock(side_effect=ServiceUnavailableError("down"))

    with pytest.raises(ServiceUnavailableError, match="down"):
        await no_sleep_retry(max_attempts=2).run("op", fn)

    assert fn.await_count == 2


async def test_non_retryable_error_propagates_immediately(
    no_sleep_retry: Callable[..., RetryPolicy],
) -> None:
    fn = AsyncMock(side_effect=ServiceAPIError("bad request", status_code=400))

    with pytest.raises(ServiceAPIError):
        await no_sleep_retry(max_attempts=5).run("op", fn)

    assert fn.await_count == 1
