from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self

import pytest

from idsync.adapters.notification import LoggingNotifier, SmtpNotifier, build_notifier
from idsync.config import SmtpConfig

if TYPE_CHECKING:
    from email.message import EmailMessage
    from types import TracebackType


@dataclass
class FakeSMTP:
    host: str
    port: int
    sent: list[EmailMessage] = field(default_factory=list["EmailMessage"])
    closed: bool = False

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.closed = True

    def send_message(self, message: EmailMessage) -> None:
        self.sent.append(message)


@pytest.fixture
def smtp_config() -> SmtpConfig:
    return SmtpConfig(
        host="mail.corp.example",
        port=2525,
        sender="idsync@corp.example",
        recipients=("ops@corp.example", "iam@corp.example"),
    )


def test_smtp_notifier_sends_one_message(smtp_config: SmtpConfig) -> None:
    connections: list[FakeSMTP] = []

    def factory(host: str, port: int) -> FakeSMTP:
        connection = FakeSMTP(host, port)
        connections.append(connection)
        return connection

    notifier = SmtpNotifier(smtp_config, smtp_factory=factory)  # type: ignore[arg-type]
    notifier.send("Errors in category add (1 failed)", "  - jdoe: boom")

    (connection,) = connections
    assert (connection.host, connection.port) == ("mail.corp.example", 2525)
    assert connection.closed
    (message,) = connection.sent
    assert message["Subject"] == "[idsync] Errors in category add (1 failed)"
    assert message["From"] == "idsync@corp.example"
    assert message["To"] == "ops@corp.example, iam@corp.example"
    assert "jdoe: boom" in message.get_content()


def test_build_notifier_falls_back_to_logging(caplog: pytest.LogCaptureFixture) -> None:
    notifier = build_notifier(None)

    with caplog.at_level(logging.WARNING, logger="idsync.adapters.notification"):
        notifier.send("Safety gate aborted category remove", "  - leaver")

    assert isinstance(notifier, LoggingNotifier)
    assert "Safety gate aborted category remove" in caplog.text


def test_build_notifier_uses_smtp_when_configured(smtp_config: SmtpConfig) -> None:
    assert isinstance(build_notifier(smtp_config), SmtpNotifier)
