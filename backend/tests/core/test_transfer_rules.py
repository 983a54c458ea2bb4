"""Transfer Rules — rail-specific recipient validation and normalization.

Tests:
    - Name and ISO-2 country are required; country is upper-cased
    - BANK needs bank name + account; MOBILE_MONEY needs provider + number
    - LIGHTNING needs network BTC_LIGHTNING and a positive amount_sats if given
    - Fields for other rails are dropped from the normalized request
    - Equal requests share a fingerprint; any changed field changes it
"""

from uuid import uuid4

import pytest

from remit.core.domain_types import PayoutRail
from remit.core.errors import RemitValidationError
from remit.core.transfer_rules import (
    TransferRequest, normalize_transfer_request, request_fingerprint,
)


def _request(rail: PayoutRail, **fields) -> TransferRequest:
    values = dict(
        quote_id=uuid4(), payout_rail=rail,
        recipient_name="Ama Mensah", recipient_country="GH",
    )
    values.update(fields)
    return TransferRequest(**values)


def test_bank_request_normalized():
    result = normalize_transfer_request(_request(
        PayoutRail.BANK, recipient_name="  Ama Mensah ", recipient_country="gh",
        bank_name=" GCB ", bank_account="123", mobile_money_provider="MTN",
        memo="   ",
    ))
    assert result.recipient_name == "Ama Mensah"
    assert result.recipient_country == "GH"
    assert result.bank_name == "GCB"
    assert result.mobile_money_provider is None
    assert result.memo is None


@pytest.mark.parametrize("name", [None, "", "   "])
def test_recipient_name_required(name):
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(
            PayoutRail.BANK, recipient_name=name, bank_name="GCB", bank_account="1",
        ))
    assert exc.value.field == "recipientName"


@pytest.mark.parametrize("country", ["GHA", "G", "1A"])
def test_country_must_be_iso2(country):
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(
            PayoutRail.BANK, recipient_country=country, bank_name="GCB", bank_account="1",
        ))
    assert exc.value.message == "recipientCountry must be ISO2 format"


def test_country_required():
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(
            PayoutRail.BANK, recipient_country=None, bank_name="GCB", bank_account="1",
        ))
    assert exc.value.message == "recipientCountry is required"


def test_bank_requires_account():
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(PayoutRail.BANK, bank_name="GCB"))
    assert exc.value.http_status == 400
    assert exc.value.field == "bank"


def test_mobile_money_requires_number():
    with pytest.raises(RemitValidationError):
        normalize_transfer_request(_request(
            PayoutRail.MOBILE_MONEY, mobile_money_provider="MTN",
        ))


def test_mobile_money_drops_bank_fields():
    result = normalize_transfer_request(_request(
        PayoutRail.MOBILE_MONEY, mobile_money_provider="MTN",
        mobile_money_number="+233200000000", bank_name="GCB", bank_account="1",
    ))
    assert result.bank_name is None
    assert result.bank_account is None
    assert result.mobile_money_number == "+233200000000"


def test_lightning_network_upper_cased():
    result = normalize_transfer_request(_request(
        PayoutRail.LIGHTNING, crypto_network="btc_lightning", amount_sats=5000,
    ))
    assert result.crypto_network == "BTC_LIGHTNING"
    assert result.amount_sats == 5000


def test_lightning_rejects_onchain():
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(
            PayoutRail.LIGHTNING, crypto_network="BTC_ONCHAIN",
        ))
    assert "BTC_LIGHTNING" in exc.value.message


def test_lightning_requires_network():
    with pytest.raises(RemitValidationError):
        normalize_transfer_request(_request(PayoutRail.LIGHTNING))


@pytest.mark.parametrize("sats", [0, -10])
def test_lightning_amount_must_be_positive(sats):
    with pytest.raises(RemitValidationError) as exc:
        normalize_transfer_request(_request(
            PayoutRail.LIGHTNING, crypto_network="BTC_LIGHTNING", amount_sats=sats,
        ))
    assert exc.value.field == "crypto.amountSats"


def test_amount_sats_dropped_for_fiat_rails():
    result = normalize_transfer_request(_request(
        PayoutRail.BANK, bank_name="GCB", bank_account="1", amount_sats=100,
    ))
    assert result.amount_sats is None


def test_request_fingerprint():
    quote_id = uuid4()
    request = _request(PayoutRail.BANK, quote_id=quote_id, bank_name="GCB", bank_account="123")
    same = _request(PayoutRail.BANK, quote_id=quote_id, bank_name="GCB", bank_account="123")
    other_account = _request(
        PayoutRail.BANK, quote_id=quote_id, bank_name="GCB", bank_account="124",
    )

    assert request_fingerprint(request) == request_fingerprint(same)
    assert request_fingerprint(request) != request_fingerprint(other_account)
    assert len(request_fingerprint(request)) == 64
