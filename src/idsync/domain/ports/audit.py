"""Ports for the append-only compliance export."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from idsync.domain.model import Category, ChangeRecord, MutationResult


@runtime_checkable
class AuditSink(Protocol):
    """Append every change and result of one category of one run."""

    def record(
        self,
        run_id: UUID,
        category: Category,
        changes: Sequence[ChangeRecord],
        results: Sequence[MutationResult],
    ) -> None: ...
