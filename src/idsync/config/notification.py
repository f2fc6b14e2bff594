"""Notification delivery settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, env_list, optional_env_var

DEFAULT_SMTP_PORT = 25


@dataclass(frozen=True, slots=True)
class SmtpConfig:
    host: str
    port: int
    sender: str
    recipients: tuple[str, ...]
    subject_prefix: str = "[idsync]"


def get_smtp_config() -> SmtpConfig | None:
    """Return SMTP settings, or ``None`` when mail delivery is not configured."""

    host = optional_env_var("IDSYNC_SMTP_HOST")
    recipients = env_list("IDSYNC_SMTP_RECIPIENTS")
    if host is None or not recipients:
        return None
    return SmtpConfig(
        host=host,
        port=env_int("IDSYNC_SMTP_PORT", DEFAULT_SMTP_PORT),
        sender=optional_env_var("IDSYNC_SMTP_SENDER", "idsync@localhost") or "idsync@localhost",
        recipients=recipients,
    )
