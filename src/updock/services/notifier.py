"""Upgrade outcome notifications for updock."""

import smtplib
import socket
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List, Optional

from updock.errors import NotificationError


def parse_recipients(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class NullNotifier:
    """Used when no recipients are configured."""

    def __init__(self, logger):
        self.logger = logger

    def send(self, subject: str, body: str):
        self.logger.debug("No notification recipients configured, skipping: %s", subject)


class EmailNotifier:
    """Sends plain-text e-mails through an SMTP relay."""

    def __init__(
        self,
        logger,
        recipients: List[str],
        sender_address: str,
        sender_name: Optional[str] = None,
        smtp_host: str = "localhost",
        smtp_port: int = 25,
        timeout: float = 30.0,
        smtp_factory=smtplib.SMTP,
    ):
        self.logger = logger
        self.recipients = recipients
        self.sender_address = sender_address
        self.sender_name = sender_name
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout = timeout
        self.smtp_factory = smtp_factory

    def build_message(self, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.sender_name or "", self.sender_address))
        msg["To"] = ", ".join(self.recipients)
        return msg

    def send(self, subject: str, body: str):
        msg = self.build_message(subject, body)
        try:
            with self.smtp_factory(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.sendmail(self.sender_address, self.recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(
                f"Could not send e-mail through {self.smtp_host}:{self.smtp_port}: {exc}"
            ) from exc

        self.logger.info("Notification sent to %s", ", ".join(self.recipients))


def build_notifier(
    logger,
    recipients: Optional[str],
    sender_address: Optional[str],
    sender_name: Optional[str] = None,
    smtp_host: str = "localhost",
    smtp_port: int = 25,
):
    parsed = parse_recipients(recipients)
    if not parsed:
        return NullNotifier(logger)

    if not sender_address:
        sender_address = f"updock@{socket.getfqdn()}"

    return EmailNotifier(
        logger=logger,
        recipients=parsed,
        sender_address=sender_address,
        sender_name=sender_name,
        smtp_host=smtp_host,
        smtp_port=smtp_port,
    )
