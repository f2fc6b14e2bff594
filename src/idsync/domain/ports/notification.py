"""Ports for operator notifications."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Deliver a human-readable message to the operators of a sync job."""

    def send(self, subject: str, body: str) -> None: ...
