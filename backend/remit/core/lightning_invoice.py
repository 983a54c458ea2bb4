"""Lightning Invoice — deterministic invoice stub for simulated Lightning payouts.

Invariants:
    - payment_hash = sha256("<reference>:<amount_sats>") hex
    - invoice = "lnbc<amount_sats>n1" + payment_hash[:24] + lower-cased reference
    - Same inputs always give the same invoice
"""

import hashlib
import math
from dataclasses import dataclass

SATS_PER_SEND_UNIT = 1000


@dataclass(frozen=True)
class LightningInvoice:
    invoice: str
    payment_hash: str


def create_lightning_invoice(reference: str, amount_sats: int) -> LightningInvoice:
    payment_hash = hashlib.sha256(f"{reference}:{amount_sats}".encode()).hexdigest()
    invoice = f"lnbc{amount_sats}n1{payment_hash[:24]}{reference.lower()}"
    return LightningInvoice(invoice=invoice, payment_hash=payment_hash)


def default_amount_sats(send_amount: float) -> int:
    """Fallback invoice size when the caller does not pass amount_sats."""
    return max(1, math.floor(send_amount * SATS_PER_SEND_UNIT + 0.5))
