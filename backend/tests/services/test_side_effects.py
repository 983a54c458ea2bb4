"""Side Effects, Notifier and Alerts — best-effort channels around a transfer change.

Invariants:
    - A failing side effect is logged and reported to its hook, never raised
    - Queued side effects wait for the response; inline ones run immediately
    - Without full SMTP credentials the notifier only logs
"""

import logging

from fastapi import BackgroundTasks

from remit.config import Settings
from remit.core.collaborator_protocols import TransferStatusNotice
from remit.services.alerts import LogAlerter
from remit.services.notifier import (
    LoggingNotifier, SmtpNotifier, build_notifier, receipt_body, receipt_subject,
)
from remit.services.side_effects import SideEffects

from tests.services.fakes import START


def _notice(**overrides) -> TransferStatusNotice:
    values = dict(
        to="ama@example.com",
        status="COMPLETED",
        transfer_id="t-1",
        reference_code="FX-ABC234",
        send_amount=100.0,
        total_fee=3.9,
        recipient_gets=1169.03,
        from_asset="USD",
        to_asset="GHS",
        recipient_name="Ama Mensah",
        receipt_url="http://localhost:3000/transfer/t-1",
        timestamp=START,
    )
    values.update(overrides)
    return TransferStatusNotice(**values)


# ─── SideEffects ────────────────────────────────────────────────

async def test_inline_without_background_tasks():
    calls = []

    async def record(value):
        calls.append(value)

    await SideEffects().dispatch("audit", record, "a")

    assert calls == ["a"]


async def test_failure_is_logged_and_hooked(caplog):
    errors = []

    async def explode():
        raise ConnectionError("smtp down")

    with caplog.at_level(logging.ERROR, logger="remit.services.side_effects"):
        await SideEffects().dispatch("notify", explode, on_error=errors.append)

    assert [str(e) for e in errors] == ["smtp down"]
    assert caplog.records[0].side_effect == "notify"


async def test_failing_hook_is_contained():
    async def explode():
        raise ConnectionError("smtp down")

    def broken_hook(error):
        raise RuntimeError("alerting down")

    await SideEffects().dispatch("notify", explode, on_error=broken_hook)


async def test_background_tasks_defer_until_run():
    calls = []
    tasks = BackgroundTasks()

    async def record(value):
        calls.append(value)

    effects = SideEffects(tasks)
    await effects.dispatch("audit", record, "queued")
    await effects.dispatch("audit", record, "now", inline=True)

    assert calls == ["now"]
    await tasks()
    assert calls == ["now", "queued"]


# ─── Notifier ───────────────────────────────────────────────────

def test_receipt_text():
    notice = _notice()

    assert receipt_subject(notice) == "Your Remit receipt (FX-ABC234)"
    body = receipt_body(notice)
    assert "Your transfer is COMPLETED." in body
    assert "Recipient gets: 1169.03 GHS" in body
    assert body.endswith("View receipt: http://localhost:3000/transfer/t-1")


def test_build_notifier_requires_full_credentials():
    partial = Settings(smtp_host="smtp.example.com", smtp_user=None, smtp_password=None)
    full = Settings(smtp_host="smtp.example.com", smtp_user="u", smtp_password="p")

    assert isinstance(build_notifier(partial), LoggingNotifier)
    assert isinstance(build_notifier(full), SmtpNotifier)


async def test_logging_notifier(caplog):
    with caplog.at_level(logging.INFO, logger="remit.services.notifier"):
        await LoggingNotifier().send_transfer_status(_notice())

    assert caplog.records[0].reference_code == "FX-ABC234"


# ─── Alerts ─────────────────────────────────────────────────────

def test_alerts_are_warning_records(caplog):
    alerter = LogAlerter()
    with caplog.at_level(logging.WARNING, logger="remit.services.alerts"):
        alerter.transfer_failure("t-1", {"rail": "BANK"})
        alerter.payout_failure("t-1", {"provider": "BankSim"})
        alerter.notification_failure("t-1", {"status": "COMPLETED"})

    assert [r.alert for r in caplog.records] == [
        "transfer_failure_alert", "payout_failure_alert", "email_failure_alert",
    ]
    assert all(r.levelno == logging.WARNING for r in caplog.records)
    assert caplog.records[0].meta == {"rail": "BANK"}
