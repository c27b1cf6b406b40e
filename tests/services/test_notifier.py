import smtplib

import pytest

from updock.errors import NotificationError
from updock.services.notifier import EmailNotifier, NullNotifier, build_notifier, parse_recipients


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        FakeSMTP.instances.append(self)

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class RefusingSMTP(FakeSMTP):
    def sendmail(self, sender, recipients, message):
        raise smtplib.SMTPRecipientsRefused({})


def test_parse_recipients_ignores_blanks():
    assert parse_recipients(" ops@example.com, ,dev@example.com ") == ["ops@example.com", "dev@example.com"]
    assert parse_recipients(None) == []


def test_build_notifier_without_recipients_is_null():
    assert isinstance(build_notifier(DummyLogger(), recipients="", sender_address=None), NullNotifier)


def test_email_notifier_sends_through_smtp():
    FakeSMTP.instances.clear()
    notifier = EmailNotifier(
        logger=DummyLogger(),
        recipients=["ops@example.com"],
        sender_address="updock@example.com",
        sender_name="Updock",
        smtp_host="mail.example.com",
        smtp_port=2525,
        smtp_factory=FakeSMTP,
    )

    notifier.send("gitlab upgraded on host1", "from 16.0 to 16.1")

    server = FakeSMTP.instances[0]
    assert (server.host, server.port) == ("mail.example.com", 2525)
    sender, recipients, message = server.sent[0]
    assert sender == "updock@example.com"
    assert recipients == ["ops@example.com"]
    assert "Subject: gitlab upgraded on host1" in message
    assert "From: Updock <updock@example.com>" in message


def test_email_notifier_wraps_smtp_errors():
    notifier = EmailNotifier(
        logger=DummyLogger(),
        recipients=["ops@example.com"],
        sender_address="updock@example.com",
        smtp_factory=RefusingSMTP,
    )

    with pytest.raises(NotificationError, match="Could not send e-mail"):
        notifier.send("subject", "body")
