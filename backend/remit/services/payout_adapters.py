"""Payout Adapters — per-rail payout execution behind the PayoutAdapter protocol.

Invariants:
    - Exactly one adapter per PayoutRail
    - Simulated outcome is deterministic: first byte of sha256("<RAIL>:<transfer_id>") % 4 != 0
    - When simulated payouts are not allowed, execute() reports failure and never pretends success
"""

import hashlib
import logging

from remit.config import Settings
from remit.core.collaborator_protocols import PayoutAdapter, PayoutResult, PayoutTarget
from remit.core.domain_types import PayoutMode, PayoutRail

logger = logging.getLogger(__name__)

SIMULATED_PROVIDERS: dict[PayoutRail, str] = {
    PayoutRail.BANK: "BankSim",
    PayoutRail.MOBILE_MONEY: "MTN-Sim",
    PayoutRail.LIGHTNING: "LightningSim",
}

DISABLED_REASON = "Simulated payouts are disabled in this environment."
SIMULATED_FAILURE_REASON = "Simulated payout failed"


def deterministic_success(seed: str) -> bool:
    digest = hashlib.sha256(seed.encode()).hexdigest()
    return int(digest[:2], 16) % 4 != 0


class SimulatedPayoutAdapter:
    def __init__(
        self, rail: PayoutRail, provider: str,
        allowed: bool = True, simulated_mode: bool = True,
    ):
        self.rail = rail
        self.provider = provider
        self.allowed = allowed
        self.simulated_mode = simulated_mode

    async def execute(self, target: PayoutTarget) -> PayoutResult:
        if not self.allowed:
            mode = PayoutMode.SIMULATED if self.simulated_mode else PayoutMode.LIVE
            return PayoutResult(
                ok=False, provider=self.provider, mode=mode, reason=DISABLED_REASON,
            )
        ok = deterministic_success(f"{self.rail.value}:{target.transfer_id}")
        logger.info(
            f"Simulated payout {'succeeded' if ok else 'failed'}",
            extra={
                "transfer_id": target.transfer_id,
                "rail": self.rail.value,
                "provider": self.provider,
            },
        )
        return PayoutResult(
            ok=ok, provider=self.provider, mode=PayoutMode.SIMULATED,
            reason=None if ok else SIMULATED_FAILURE_REASON,
        )


def build_payout_adapters(settings: Settings) -> dict[PayoutRail, PayoutAdapter]:
    return {
        rail: SimulatedPayoutAdapter(
            rail, provider,
            allowed=settings.allow_simulated_payouts,
            simulated_mode=settings.simulated_payouts,
        )
        for rail, provider in SIMULATED_PROVIDERS.items()
    }
