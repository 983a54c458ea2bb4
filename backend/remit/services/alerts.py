"""Alerts — operator-facing warning lines for failures that need a human.

Invariants:
    - Alerts are WARNING log records carrying `alert` and `transfer_id` extras
    - Raising an alert never raises
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class LogAlerter:
    def transfer_failure(self, transfer_id: str, context: dict[str, Any]) -> None:
        self._emit("transfer_failure_alert", transfer_id, context)

    def payout_failure(self, transfer_id: str, context: dict[str, Any]) -> None:
        self._emit("payout_failure_alert", transfer_id, context)

    def notification_failure(self, transfer_id: str, context: dict[str, Any]) -> None:
        self._emit("email_failure_alert", transfer_id, context)

    def _emit(self, alert: str, transfer_id: str, context: dict[str, Any]) -> None:
        logger.warning(
            alert, extra={"alert": alert, "transfer_id": transfer_id, "meta": context},
        )
