"""Notifier — transfer status receipts for the transfer's owner.

Invariants:
    - Called only for transfers carrying a user email
    - SmtpNotifier only when SMTP host, user and password are all configured;
      otherwise LoggingNotifier records what would have been sent
    - Failures propagate to the caller (SideEffects guards and alerts)

Design Decisions:
    - stdlib smtplib in a worker thread (asyncio.to_thread): one message per
      status change does not warrant an async mail client
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from remit.config import Settings
from remit.core.collaborator_protocols import Notifier, TransferStatusNotice

logger = logging.getLogger(__name__)


def receipt_subject(notice: TransferStatusNotice) -> str:
    return f"Your Remit receipt ({notice.reference_code})"


def receipt_body(notice: TransferStatusNotice) -> str:
    return (
        f"Your transfer is {notice.status}.\n\n"
        f"Reference: {notice.reference_code}\n"
        f"Recipient: {notice.recipient_name}\n"
        f"Send amount: {notice.send_amount} {notice.from_asset}\n"
        f"Total fees: {notice.total_fee} {notice.from_asset}\n"
        f"Recipient gets: {notice.recipient_gets} {notice.to_asset}\n\n"
        f"View receipt: {notice.receipt_url}"
    )


class LoggingNotifier:
    """Development notifier: the receipt is a log line."""

    async def send_transfer_status(self, notice: TransferStatusNotice) -> None:
        logger.info(
            f"Receipt for {notice.reference_code} ({notice.status}) to {notice.to}",
            extra={
                "transfer_id": notice.transfer_id,
                "reference_code": notice.reference_code,
                "status": notice.status,
            },
        )


class SmtpNotifier:
    def __init__(
        self, host: str, port: int, user: str, password: str,
        sender: str, use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.use_tls = use_tls

    async def send_transfer_status(self, notice: TransferStatusNotice) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = notice.to
        message["Subject"] = receipt_subject(notice)
        message.set_content(receipt_body(notice))
        await asyncio.to_thread(self._send, message)
        logger.info(
            f"Receipt email sent for {notice.reference_code}",
            extra={"transfer_id": notice.transfer_id, "status": notice.status},
        )

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            if self.use_tls:
                smtp.starttls()
            smtp.login(self.user, self.password)
            smtp.send_message(message)


def build_notifier(settings: Settings) -> Notifier:
    if settings.smtp_configured:
        return SmtpNotifier(
            settings.smtp_host, settings.smtp_port, settings.smtp_user,
            settings.smtp_password, settings.smtp_from, settings.smtp_use_tls,
        )
    return LoggingNotifier()
