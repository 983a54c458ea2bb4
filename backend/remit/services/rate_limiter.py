"""Rate Limiter — fixed-window request budgets stored in rate_limit_buckets.

Invariants:
    - One bucket per key "<action>:<identity>"; count never exceeds limit within a window
    - Increment is a single conditional UPDATE (count < limit AND reset_at > now)
    - Missing bucket -> INSERT count=1; expired bucket -> conditional reset; full -> deny
    - Lost races (duplicate INSERT, reset already done) retry from the top
    - Commits on the caller's session: the counted request stays counted even if
      the request later fails

Design Decisions:
    - Atomicity from the database, never from an in-process lock: several app
      workers share one budget
    - No RETURNING: the bucket is re-read after a successful UPDATE so SQLite and
      PostgreSQL take the same path
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from remit.core.clock import Clock, ensure_utc, utcnow
from remit.core.errors import RateLimitedError
from remit.models.rate_limit_bucket import RateLimitBucket

logger = logging.getLogger(__name__)

MAX_RACE_RETRIES = 5


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: datetime
    limit: int


class RateLimiter:
    """Shared fixed-window limiter. One instance per request session."""

    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    async def allow(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        """Count one request against `key`; report whether it fits the window."""
        for _ in range(MAX_RACE_RETRIES):
            result = await self._attempt(key, limit, window_ms)
            if result is not None:
                return result
        # Every attempt lost a race against another writer: treat as full.
        logger.warning(
            f"Rate limiter contention on {key}", extra={"rate_limit_key": key},
        )
        return RateLimitResult(
            allowed=False, remaining=0,
            reset_at=self.clock() + timedelta(milliseconds=window_ms), limit=limit,
        )

    async def enforce(
        self, action: str, identity: str, limit: int, window_ms: int,
    ) -> RateLimitResult:
        """allow() for `<action>:<identity>`, raising RateLimitedError on denial."""
        key = f"{action}:{identity}"
        result = await self.allow(key, limit, window_ms)
        if not result.allowed:
            retry_ms = int((result.reset_at - self.clock()).total_seconds() * 1000)
            logger.info(
                f"Rate limit exceeded for {key}", extra={"rate_limit_key": key},
            )
            raise RateLimitedError(action, max(0, retry_ms))
        return result

    async def _attempt(
        self, key: str, limit: int, window_ms: int,
    ) -> RateLimitResult | None:
        now = self.clock()

        bumped = await self.db.execute(
            update(RateLimitBucket)
            .where(RateLimitBucket.key == key)
            .where(RateLimitBucket.reset_at > now)
            .where(RateLimitBucket.count < limit)
            .values(count=RateLimitBucket.count + 1)
            .execution_options(synchronize_session=False)
        )
        if bumped.rowcount == 1:
            row = await self._read(key)
            await self.db.commit()
            count, reset_at = row
            return RateLimitResult(
                allowed=True, remaining=max(0, limit - count),
                reset_at=reset_at, limit=limit,
            )

        row = await self._read(key)
        reset_at = now + timedelta(milliseconds=window_ms)

        if row is None:
            try:
                await self.db.execute(
                    insert(RateLimitBucket).values(key=key, count=1, reset_at=reset_at)
                )
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                return None
            return RateLimitResult(
                allowed=True, remaining=limit - 1, reset_at=reset_at, limit=limit,
            )

        count, existing_reset = row
        if existing_reset <= now:
            reset = await self.db.execute(
                update(RateLimitBucket)
                .where(RateLimitBucket.key == key)
                .where(RateLimitBucket.reset_at <= now)
                .values(count=1, reset_at=reset_at)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            if reset.rowcount != 1:
                return None
            return RateLimitResult(
                allowed=True, remaining=limit - 1, reset_at=reset_at, limit=limit,
            )

        if count >= limit:
            await self.db.commit()
            return RateLimitResult(
                allowed=False, remaining=0, reset_at=existing_reset, limit=limit,
            )

        # Window is live and has room, but the UPDATE missed: someone reset it
        # between our statements.
        await self.db.commit()
        return None

    async def _read(self, key: str) -> tuple[int, datetime] | None:
        row = (await self.db.execute(
            select(RateLimitBucket.count, RateLimitBucket.reset_at)
            .where(RateLimitBucket.key == key)
        )).one_or_none()
        if row is None:
            return None
        count, reset_at = row
        return count, ensure_utc(reset_at)
