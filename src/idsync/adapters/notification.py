"""Notifier adapters: SMTP mail delivery and a log-only fallback."""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from idsync.config.notification import SmtpConfig
    from idsync.domain.ports import Notifier

log = getLogger(__name__)


@dataclass(slots=True)
class LoggingNotifier:
    """Write notifications to the log when no mail relay is configured."""

    def send(self, subject: str, body: str) -> None:
        log.warning("Notification: %s\n%s", subject, body)


@dataclass(slots=True)
class SmtpNotifier:
    config: SmtpConfig
    smtp_factory: Callable[[str, int], smtplib.SMTP] = smtplib.SMTP

    def build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = f"{self.config.subject_prefix} {subject}".strip()
        message["From"] = self.config.sender
        message["To"] = ", ".join(self.config.recipients)
        message.set_content(body)
        return message

    def send(self, subject: str, body: str) -> None:
        message = self.build_message(subject, body)
        with self.smtp_factory(self.config.host, self.config.port) as smtp:
            smtp.send_message(message)
        log.info("Sent notification %r to %s", subject, ", ".join(self.config.recipients))


def build_notifier(config: SmtpConfig | None) -> Notifier:
    if config is None:
        return LoggingNotifier()
    return SmtpNotifier(config)
