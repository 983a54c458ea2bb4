"""Transfer State Machine — allowed status edges for transfers and Lightning payouts.

Invariants:
    - Transfers only move forward: DRAFT -> READY -> PROCESSING -> {COMPLETED, FAILED}
    - READY and DRAFT may also end in CANCELED or EXPIRED
    - COMPLETED, FAILED, CANCELED, EXPIRED have no outgoing edges
    - A transition to the current status is never allowed
    - CryptoPayout: CREATED -> REQUESTED -> {PAID, EXPIRED, FAILED}; CREATED may also
      go straight to EXPIRED or FAILED

Design Decisions:
    - Tables as frozensets keyed by enum: every edge visible in one place
    - assert_* raise InvalidTransitionError; can_* are the boolean forms
    - A terminal current status is reported as such, whatever was requested
"""

from remit.core.domain_types import CryptoPayoutStatus, TransferStatus
from remit.core.errors import ErrorContext, InvalidTransitionError


TRANSFER_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.DRAFT: frozenset({
        TransferStatus.READY, TransferStatus.CANCELED, TransferStatus.EXPIRED,
    }),
    TransferStatus.READY: frozenset({
        TransferStatus.PROCESSING, TransferStatus.CANCELED, TransferStatus.EXPIRED,
    }),
    TransferStatus.PROCESSING: frozenset({
        TransferStatus.COMPLETED, TransferStatus.FAILED,
    }),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.FAILED: frozenset(),
    TransferStatus.CANCELED: frozenset(),
    TransferStatus.EXPIRED: frozenset(),
}

PAYOUT_TRANSITIONS: dict[CryptoPayoutStatus, frozenset[CryptoPayoutStatus]] = {
    CryptoPayoutStatus.CREATED: frozenset({
        CryptoPayoutStatus.REQUESTED, CryptoPayoutStatus.EXPIRED, CryptoPayoutStatus.FAILED,
    }),
    CryptoPayoutStatus.REQUESTED: frozenset({
        CryptoPayoutStatus.PAID, CryptoPayoutStatus.EXPIRED, CryptoPayoutStatus.FAILED,
    }),
    CryptoPayoutStatus.PAID: frozenset(),
    CryptoPayoutStatus.EXPIRED: frozenset(),
    CryptoPayoutStatus.FAILED: frozenset(),
}

TERMINAL_TRANSFER_STATES = frozenset(
    status for status, edges in TRANSFER_TRANSITIONS.items() if not edges
)

# Payout sub-state that follows a transfer reaching a closing status.
PAYOUT_STATUS_FOR_TRANSFER: dict[TransferStatus, CryptoPayoutStatus] = {
    TransferStatus.FAILED: CryptoPayoutStatus.FAILED,
    TransferStatus.EXPIRED: CryptoPayoutStatus.EXPIRED,
    TransferStatus.CANCELED: CryptoPayoutStatus.EXPIRED,
}


def can_transition_transfer(current: TransferStatus, requested: TransferStatus) -> bool:
    return requested in TRANSFER_TRANSITIONS.get(current, frozenset())


def can_transition_payout(
    current: CryptoPayoutStatus, requested: CryptoPayoutStatus,
) -> bool:
    return requested in PAYOUT_TRANSITIONS.get(current, frozenset())


def assert_transfer_transition(
    current: TransferStatus, requested: TransferStatus,
    context: ErrorContext | None = None,
) -> None:
    """Raise InvalidTransitionError unless current -> requested is an edge."""
    if current in TERMINAL_TRANSFER_STATES:
        raise InvalidTransitionError(
            current.value, requested.value, context, terminal=True,
        )
    if current == requested or not can_transition_transfer(current, requested):
        raise InvalidTransitionError(current.value, requested.value, context)
