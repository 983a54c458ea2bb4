"""Transfer Rules — pure validation of a transfer creation request.

Invariants:
    - recipient_name non-empty; recipient_country is ISO-2 (upper-cased)
    - BANK requires bank name + account
    - MOBILE_MONEY requires provider + number
    - LIGHTNING requires crypto network BTC_LIGHTNING; amount_sats, if given, is a positive integer
    - Strings are trimmed; empty strings count as missing
    - The request fingerprint depends only on field values, not key order
"""

import hashlib
import json
import re
from dataclasses import asdict, dataclass, replace
from uuid import UUID

from remit.core.domain_types import CryptoNetwork, PayoutRail
from remit.core.errors import RemitValidationError

ISO2_PATTERN = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True)
class TransferRequest:
    """Fully-specified creation request, as received from the API layer."""
    quote_id: UUID
    payout_rail: PayoutRail
    recipient_name: str | None
    recipient_country: str | None
    recipient_phone: str | None = None
    bank_name: str | None = None
    bank_account: str | None = None
    mobile_money_provider: str | None = None
    mobile_money_number: str | None = None
    memo: str | None = None
    crypto_network: str | None = None
    amount_sats: int | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_transfer_request(request: TransferRequest) -> TransferRequest:
    """Validate rail-specific recipient fields and return a trimmed copy."""
    name = _clean(request.recipient_name)
    if not name:
        raise RemitValidationError("recipientName is required", "recipientName")

    country = (_clean(request.recipient_country) or "").upper()
    if not country:
        raise RemitValidationError("recipientCountry is required", "recipientCountry")
    if not ISO2_PATTERN.match(country):
        raise RemitValidationError(
            "recipientCountry must be ISO2 format", "recipientCountry",
        )

    bank_name = _clean(request.bank_name)
    bank_account = _clean(request.bank_account)
    mm_provider = _clean(request.mobile_money_provider)
    mm_number = _clean(request.mobile_money_number)
    network = (_clean(request.crypto_network) or "").upper() or None

    if request.payout_rail == PayoutRail.BANK:
        if not bank_name or not bank_account:
            raise RemitValidationError("bank name and account are required", "bank")
        mm_provider = mm_number = None
        network = None
    elif request.payout_rail == PayoutRail.MOBILE_MONEY:
        if not mm_provider or not mm_number:
            raise RemitValidationError(
                "mobile money provider and number are required", "mobileMoney",
            )
        bank_name = bank_account = None
        network = None
    else:
        _check_lightning(network, request.amount_sats)
        bank_name = bank_account = mm_provider = mm_number = None

    return replace(
        request,
        recipient_name=name,
        recipient_country=country,
        recipient_phone=_clean(request.recipient_phone),
        bank_name=bank_name,
        bank_account=bank_account,
        mobile_money_provider=mm_provider,
        mobile_money_number=mm_number,
        memo=_clean(request.memo),
        crypto_network=network,
        amount_sats=request.amount_sats if request.payout_rail == PayoutRail.LIGHTNING else None,
    )


def _check_lightning(network: str | None, amount_sats: int | None) -> None:
    valid_networks = {n.value for n in CryptoNetwork}
    if network not in valid_networks:
        raise RemitValidationError(
            "crypto.network must be BTC_LIGHTNING or BTC_ONCHAIN", "crypto.network",
        )
    if network != CryptoNetwork.BTC_LIGHTNING.value:
        raise RemitValidationError(
            "crypto.network must be BTC_LIGHTNING for Lightning payouts",
            "crypto.network",
        )
    if amount_sats is not None and amount_sats <= 0:
        raise RemitValidationError(
            "crypto.amountSats must be a positive integer", "crypto.amountSats",
        )


def request_fingerprint(request: TransferRequest) -> str:
    """Stable sha256 over the request as received, stored beside its idempotency key."""
    payload = {
        name: (value.value if isinstance(value, PayoutRail) else value)
        for name, value in asdict(request).items()
    }
    encoded = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
