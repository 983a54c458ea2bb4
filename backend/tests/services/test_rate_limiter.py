"""Rate Limiter — fixed-window budgets persisted in rate_limit_buckets.

Invariants:
    - limit=3: calls 1-3 allowed, call 4 denied, a call after reset_at starts a new window
    - Keys are independent
    - enforce() raises RateLimitedError with the time left in the window
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from remit.core.errors import RateLimitedError
from remit.models.rate_limit_bucket import RateLimitBucket
from remit.services.rate_limiter import RateLimiter

WINDOW_MS = 60_000


@pytest.fixture
def limiter(test_db, clock):
    return RateLimiter(test_db, clock)


async def test_fourth_call_denied_then_window_resets(limiter, clock):
    results = [await limiter.allow("quote:1.2.3.4", 3, WINDOW_MS) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]

    clock.advance(61)
    again = await limiter.allow("quote:1.2.3.4", 3, WINDOW_MS)
    assert again.allowed
    assert again.remaining == 2


async def test_reset_at_is_window_end(limiter, clock):
    start = clock()
    first = await limiter.allow("k", 3, WINDOW_MS)
    clock.advance(10)
    second = await limiter.allow("k", 3, WINDOW_MS)

    assert (first.reset_at - start).total_seconds() == 60
    assert second.reset_at == first.reset_at


async def test_keys_are_independent(limiter):
    for _ in range(3):
        await limiter.allow("quote:a", 3, WINDOW_MS)

    assert not (await limiter.allow("quote:a", 3, WINDOW_MS)).allowed
    assert (await limiter.allow("quote:b", 3, WINDOW_MS)).allowed


async def test_count_never_exceeds_limit(limiter, test_db):
    for _ in range(6):
        await limiter.allow("k", 2, WINDOW_MS)

    count = (await test_db.execute(
        select(RateLimitBucket.count).where(RateLimitBucket.key == "k")
    )).scalar_one()
    assert count == 2


async def test_enforce_raises_with_retry_hint(limiter, clock):
    await limiter.enforce("transfer_create", "user-1", 1, WINDOW_MS)
    clock.advance(15)

    with pytest.raises(RateLimitedError) as exc:
        await limiter.enforce("transfer_create", "user-1", 1, WINDOW_MS)

    assert exc.value.retry_after_ms == 45_000
    assert exc.value.response_headers() == {"Retry-After": "45"}


async def test_enforce_builds_action_identity_key(limiter, test_db):
    await limiter.enforce("quote", "10.0.0.1", 5, WINDOW_MS)

    keys = (await test_db.execute(select(RateLimitBucket.key))).scalars().all()
    assert keys == ["quote:10.0.0.1"]


async def test_lost_insert_race_retries(limiter, clock, fake_db_manager, monkeypatch):
    """A bucket created between our read and our INSERT is picked up on retry."""
    original_read = limiter._read
    calls = {"n": 0}

    async def racing_read(key):
        calls["n"] += 1
        if calls["n"] == 1:
            async with fake_db_manager.transaction() as other:
                other.add(RateLimitBucket(
                    key=key, count=1, reset_at=clock() + timedelta(minutes=1),
                ))
            return None
        return await original_read(key)

    monkeypatch.setattr(limiter, "_read", racing_read)
    result = await limiter.allow("raced", 3, WINDOW_MS)

    assert result.allowed
    assert result.remaining == 1
