"""RateLimitBucket ORM — fixed-window counter per (action, caller) key.

Invariants:
    - key is the primary key: one bucket per key, created and reset by RateLimiter only
    - A bucket whose reset_at has passed counts as empty
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from remit.db.base import Base


class RateLimitBucket(Base):
    __tablename__ = "rate_limit_buckets"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reset_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
