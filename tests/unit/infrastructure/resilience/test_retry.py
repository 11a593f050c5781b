# tests/unit/infrastructure/resilience/test_retry.py
from __future__ import annotations

import pytest

from tickerbot.infrastructure.resilience.retry import NO_RETRY, RetryPolicy, retry_async


def test_backoff_is_exponential_and_capped() -> None:
    policy = RetryPolicy(total=5, base=0.5, cap=2.0, jitter=False)
    assert [policy.backoff(i) for i in range(4)] == [0.5, 1.0, 2.0, 2.0]


def test_jittered_backoff_stays_within_bound() -> None:
    policy = RetryPolicy(total=3, base=1.0, cap=4.0, jitter=True)
    for attempt in range(3):
        assert 0.0 <= policy.backoff(attempt) <= min(4.0, 2**attempt)


@pytest.mark.asyncio
async def test_retries_transient_then_succeeds() -> None:
    calls = 0
    seen: list[int] = []

    async def flaky() -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ConnectionError("blip")
        return "ok"

    result = await retry_async(
        flaky,
        policy=RetryPolicy(total=2, base=0.0, cap=0.0, jitter=False),
        retry_on=lambda exc: isinstance(exc, ConnectionError),
        on_retry=lambda attempt, exc: seen.append(attempt),
    )
    assert result == "ok"
    assert calls == 3
    assert seen == [0, 1]


@pytest.mark.asyncio
async def test_non_transient_error_is_raised_immediately() -> None:
    calls = 0

    async def broken() -> None:
        nonlocal calls
        calls += 1
        raise KeyError("bad")

    with pytest.raises(KeyError):
        await retry_async(
            broken,
            policy=RetryPolicy(total=3, base=0.0, cap=0.0, jitter=False),
            retry_on=lambda exc: isinstance(exc, ConnectionError),
        )
    assert calls == 1


@pytest.mark.asyncio
async def test_budget_exhaustion_raises_last_error() -> None:
    calls = 0

    async def down() -> None:
        nonlocal calls
        calls += 1
        raise ConnectionError(str(calls))

    with pytest.raises(ConnectionError, match="1"):
        await retry_async(down, policy=NO_RETRY, retry_on=lambda exc: True)
    assert calls == 1
