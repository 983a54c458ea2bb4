"""ORM Models — SQLAlchemy declarative models for the transfer core.

Invariants:
    - All models inherit from Base (db/base.py)
    - Transfer is the aggregate root for events and crypto payouts
    - Asset, Corridor, Route are catalog data: read-only to the core

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from remit.models.asset import Asset  # noqa: F401
from remit.models.corridor import Corridor  # noqa: F401
from remit.models.route import Route  # noqa: F401
from remit.models.quote import Quote  # noqa: F401
from remit.models.transfer import Transfer  # noqa: F401
from remit.models.transfer_event import TransferEvent  # noqa: F401
from remit.models.crypto_payout import CryptoPayout  # noqa: F401
from remit.models.rate_limit_bucket import RateLimitBucket  # noqa: F401
from remit.models.audit_log_entry import AuditLogEntry  # noqa: F401
