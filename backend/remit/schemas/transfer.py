"""Transfer Schemas — creation/update requests and transfer detail responses.

Invariants:
    - Request shapes are permissive strings; rail-specific rules live in
      core/transfer_rules so API and scripts validate identically
    - Lookup responses never expose recipient account details
    - Events are emitted in timeline order (ascending id)
"""

from uuid import UUID

from pydantic import Field

from remit.core.domain_types import PayoutRail
from remit.core.errors import RemitValidationError
from remit.core.transfer_rules import TransferRequest
from remit.models.transfer import Transfer
from remit.schemas.common import CamelModel, UtcDatetime


# ─── Requests ───────────────────────────────────────────────────

class BankDetails(CamelModel):
    name: str | None = None
    account: str | None = None


class MobileMoneyDetails(CamelModel):
    provider: str | None = None
    number: str | None = None


class CryptoDetails(CamelModel):
    network: str | None = None
    amount_sats: int | None = None


class TransferCreate(CamelModel):
    quote_id: UUID
    payout_rail: str
    recipient_name: str | None = Field(None, max_length=200)
    recipient_country: str | None = Field(None, max_length=10)
    recipient_phone: str | None = Field(None, max_length=50)
    bank: BankDetails | None = None
    mobile_money: MobileMoneyDetails | None = None
    memo: str | None = Field(None, max_length=500)
    crypto: CryptoDetails | None = None

    def to_request(self) -> TransferRequest:
        try:
            rail = PayoutRail(self.payout_rail.strip().upper())
        except ValueError:
            raise RemitValidationError(
                "payoutRail must be BANK, MOBILE_MONEY, or LIGHTNING", "payoutRail",
            )
        bank = self.bank or BankDetails()
        mobile = self.mobile_money or MobileMoneyDetails()
        crypto = self.crypto or CryptoDetails()
        return TransferRequest(
            quote_id=self.quote_id,
            payout_rail=rail,
            recipient_name=self.recipient_name,
            recipient_country=self.recipient_country,
            recipient_phone=self.recipient_phone,
            bank_name=bank.name,
            bank_account=bank.account,
            mobile_money_provider=mobile.provider,
            mobile_money_number=mobile.number,
            memo=self.memo,
            crypto_network=crypto.network,
            amount_sats=crypto.amount_sats,
        )


class TransferStatusUpdate(CamelModel):
    status: str


# ─── Responses ──────────────────────────────────────────────────

class TransferResponse(CamelModel):
    id: UUID
    reference_code: str
    quote_id: UUID
    status: str
    payout_rail: str
    recipient_name: str
    recipient_country: str
    recipient_phone: str | None
    recipient_bank_name: str | None
    recipient_bank_account: str | None
    recipient_mobile_money_provider: str | None
    recipient_mobile_money_number: str | None
    memo: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class QuoteSummary(CamelModel):
    id: UUID
    rail: str
    from_asset: str
    to_asset: str
    send_amount: float
    applied_rate: float
    total_fee: float
    recipient_gets: float
    rate_timestamp: UtcDatetime
    expires_at: UtcDatetime
    created_at: UtcDatetime


class CryptoPayoutResponse(CamelModel):
    id: UUID
    transfer_id: UUID
    network: str
    invoice: str | None
    payment_hash: str | None
    address: str | None
    amount_sats: int
    status: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TransferEventResponse(CamelModel):
    id: int
    type: str
    message: str
    created_at: UtcDatetime


class TransferDetailResponse(CamelModel):
    transfer: TransferResponse
    quote: QuoteSummary
    crypto_payout: CryptoPayoutResponse | None
    events: list[TransferEventResponse]

    @classmethod
    def from_transfer(cls, transfer: Transfer) -> "TransferDetailResponse":
        return cls(
            transfer=TransferResponse.model_validate(transfer),
            quote=QuoteSummary.model_validate(transfer.quote),
            crypto_payout=(
                CryptoPayoutResponse.model_validate(transfer.crypto_payout)
                if transfer.crypto_payout is not None else None
            ),
            events=[
                TransferEventResponse.model_validate(e)
                for e in sorted(transfer.events, key=lambda e: e.id)
            ],
        )


class LookupTransfer(CamelModel):
    reference_code: str
    status: str
    payout_rail: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class LookupResponse(CamelModel):
    transfer: LookupTransfer
    quote: QuoteSummary
    events: list[TransferEventResponse]

    @classmethod
    def from_transfer(cls, transfer: Transfer) -> "LookupResponse":
        return cls(
            transfer=LookupTransfer.model_validate(transfer),
            quote=QuoteSummary.model_validate(transfer.quote),
            events=[
                TransferEventResponse.model_validate(e)
                for e in sorted(transfer.events, key=lambda e: e.id)
            ],
        )


class PayoutResultResponse(CamelModel):
    ok: bool
    provider: str
    mode: str
    reason: str | None = None


class PayoutResponse(CamelModel):
    ok: bool
    payout: PayoutResultResponse
    transfer: TransferDetailResponse


class ReceiptResponse(CamelModel):
    ok: bool = True


def transfer_detail_payload(transfer: Transfer) -> dict:
    """JSON-ready transfer detail, for error bodies that carry the transfer."""
    return TransferDetailResponse.from_transfer(transfer).model_dump(
        by_alias=True, mode="json",
    )
