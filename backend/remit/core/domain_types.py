"""Domain Types — enums shared across the transfer core.

Invariants:
    - All valid states encoded as Enums, no raw string matching
    - Enum values equal their names: they are persisted and returned over JSON as-is

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - TransferEventType is wider than TransferStatus: timeline rows also record
      CREATED, QUOTE_LOCKED, INVOICE_ISSUED and PAID
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class PayoutRail(str, Enum):
    """Payout method for a transfer."""
    BANK = "BANK"
    MOBILE_MONEY = "MOBILE_MONEY"
    LIGHTNING = "LIGHTNING"


class TransferStatus(str, Enum):
    """Transfer lifecycle states, stored in the DB `status` column."""
    DRAFT = "DRAFT"
    READY = "READY"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"


class CryptoPayoutStatus(str, Enum):
    """Lightning payout sub-states, tracked apart from the parent transfer."""
    CREATED = "CREATED"
    REQUESTED = "REQUESTED"
    PAID = "PAID"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


class CryptoNetwork(str, Enum):
    BTC_LIGHTNING = "BTC_LIGHTNING"
    BTC_ONCHAIN = "BTC_ONCHAIN"


class TransferEventType(str, Enum):
    """Timeline entry types attached to a transfer."""
    CREATED = "CREATED"
    QUOTE_LOCKED = "QUOTE_LOCKED"
    INVOICE_ISSUED = "INVOICE_ISSUED"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"


class AuditAction(str, Enum):
    QUOTE_CREATED = "QUOTE_CREATED"
    TRANSFER_CREATED = "TRANSFER_CREATED"
    TRANSFER_STATUS_CHANGED = "TRANSFER_STATUS_CHANGED"
    PAYOUT_EXECUTED = "PAYOUT_EXECUTED"


class PayoutMode(str, Enum):
    SIMULATED = "SIMULATED"
    LIVE = "LIVE"


class RouteHighlight(str, Enum):
    """Informational labels a priced route can earn in a recommendation."""
    LOWEST_TOTAL_FEE = "LOWEST_TOTAL_FEE"
    FASTEST_ETA = "FASTEST_ETA"
    HIGHEST_PAYOUT = "HIGHEST_PAYOUT"


class SuggestionSlot(str, Enum):
    """Suggestion slots, in the order they claim routes."""
    BEST_VALUE = "BEST_VALUE"
    CHEAPEST = "CHEAPEST"
    FASTEST = "FASTEST"


# Event message per status transition, written into the transfer timeline.
STATUS_EVENT_MESSAGES: dict[TransferStatus, str] = {
    TransferStatus.PROCESSING: "Transfer is being processed",
    TransferStatus.COMPLETED: "Transfer completed successfully",
    TransferStatus.FAILED: "Transfer failed",
    TransferStatus.CANCELED: "Transfer canceled",
    TransferStatus.EXPIRED: "Quote expired before processing",
    TransferStatus.READY: "Transfer ready",
}

TRANSFER_CREATED_MESSAGE = "Transfer created"
INVOICE_ISSUED_MESSAGE = "Lightning invoice issued"
INVOICE_PAID_MESSAGE = "Lightning invoice paid"
PAYOUT_PAID_MESSAGE = "Payout delivered to recipient"


def quote_locked_message(expires_at_label: str) -> str:
    return f"Quote locked until {expires_at_label}"
