"""Payout Adapters — deterministic simulated outcomes and the production guard.

sha256("BANK:transfer-1") starts 0xbc (188 % 4 == 0 -> fail);
sha256("BANK:transfer-2") starts 0x2b (43 % 4 == 3 -> success).
"""

from remit.config import Settings
from remit.core.collaborator_protocols import PayoutTarget
from remit.core.domain_types import PayoutMode, PayoutRail
from remit.services.payout_adapters import (
    DISABLED_REASON, SIMULATED_FAILURE_REASON, SimulatedPayoutAdapter,
    build_payout_adapters, deterministic_success,
)


def test_deterministic_success():
    assert deterministic_success("BANK:transfer-1") is False
    assert deterministic_success("BANK:transfer-2") is True


async def test_simulated_outcome_follows_seed():
    adapter = SimulatedPayoutAdapter(PayoutRail.BANK, "BankSim")

    failed = await adapter.execute(PayoutTarget("transfer-1", PayoutRail.BANK))
    paid = await adapter.execute(PayoutTarget("transfer-2", PayoutRail.BANK))

    assert (failed.ok, failed.reason) == (False, SIMULATED_FAILURE_REASON)
    assert (paid.ok, paid.reason) == (True, None)
    assert paid.provider == "BankSim"
    assert paid.mode == PayoutMode.SIMULATED


async def test_same_transfer_same_outcome():
    adapter = SimulatedPayoutAdapter(PayoutRail.BANK, "BankSim")
    target = PayoutTarget("transfer-2", PayoutRail.BANK)

    outcomes = {(await adapter.execute(target)).ok for _ in range(3)}

    assert outcomes == {True}


async def test_disallowed_adapter_never_succeeds():
    adapter = SimulatedPayoutAdapter(
        PayoutRail.BANK, "BankSim", allowed=False, simulated_mode=False,
    )

    result = await adapter.execute(PayoutTarget("transfer-2", PayoutRail.BANK))

    assert result.ok is False
    assert result.reason == DISABLED_REASON
    assert result.mode == PayoutMode.LIVE


def test_build_adapters_one_per_rail():
    adapters = build_payout_adapters(Settings(app_env="sandbox", payouts_mode="simulated"))

    assert set(adapters) == set(PayoutRail)
    assert adapters[PayoutRail.MOBILE_MONEY].provider == "MTN-Sim"
    assert all(a.allowed for a in adapters.values())


def test_production_disables_simulation():
    adapters = build_payout_adapters(Settings(app_env="production", payouts_mode="simulated"))
    assert not any(a.allowed for a in adapters.values())
