"""Exception hierarchy for reconciliation runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class SyncError(RuntimeError):
    """Base class for errors raised by the reconciliation core."""


class FatalSyncError(SyncError):
    """Raised when a run cannot continue at all."""


class ExtractionError(FatalSyncError):
    """Raised when a directory snapshot cannot be extracted."""

    def __init__(self, domain: str, message: str) -> None:
        super().__init__(f"Extraction from {domain} failed: {message}")
        self.domain = domain


class DuplicateIdentifierError(FatalSyncError):
    """Raised when one snapshot holds the same cross-domain identifier twice."""

    def __init__(self, domain: str, identifiers: Sequence[str]) -> None:
        joined = ", ".join(identifiers)
        super().__init__(f"Duplicate identifiers in {domain} snapshot: {joined}")
        self.domain = domain
        self.identifiers = tuple(identifiers)


class CounterUnavailableError(SyncError):
    """Raised by ID counter adapters when the counter object cannot be read."""


class AccountNameExhaustedError(SyncError):
    """Raised when every suffixed variant of an account name is already taken."""

    def __init__(self, base: str, limit: int) -> None:
        super().__init__(f"No free account name for {base!r} up to suffix {limit:02d}")
        self.base = base
        self.limit = limit
