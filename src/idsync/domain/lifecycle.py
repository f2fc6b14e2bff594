"""Two-stage removal of identities that disappeared from the source domain.

A removal-eligible identity outside the leavers container is *quarantined*:
disabled, stripped of group memberships, annotated and moved to the leavers
container. Only an identity that is already inside the leavers container when
a run starts is *deleted*. Reaching ``Deleted`` therefore always takes two
separate runs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from idsync.domain.model import Category, LifecycleState, MutationResult, Outcome, path_is_under

if TYPE_CHECKING:
    from collections.abc import Callable

    from idsync.domain.model import IdentityRecord
    from idsync.domain.ports import DirectoryMutator, DirectoryReader

log = getLogger(__name__)

INFO_ATTRIBUTE = "info"
DEFAULT_SETTLE_SECONDS = 1.5


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class LifecycleEngine:
    mutator: DirectoryMutator
    reader: DirectoryReader
    leavers_container: str
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    sleep: Callable[[float], None] = time.sleep
    now_provider: Callable[[], datetime] = field(default=_utcnow)

    def next_state(self, record: IdentityRecord) -> LifecycleState:
        if path_is_under(record.path, self.leavers_container):
            return LifecycleState.DELETED
        return LifecycleState.QUARANTINED

    def process(
        self,
        record: IdentityRecord,
        *,
        category: Category = Category.REMOVE,
    ) -> MutationResult:
        """Advance ``record`` exactly one stage and report the stage reached."""

        state = self.next_state(record)
        if state is LifecycleState.DELETED:
            self.delete(record)
            outcome = Outcome.DELETED
        else:
            self.quarantine(record)
            outcome = Outcome.QUARANTINED
        return MutationResult(
            category=category,
            account_name=record.account_name,
            identifier=record.identifier,
            success=True,
            outcome=outcome,
        )

    def quarantine(self, record: IdentityRecord) -> None:
        identity = record.path
        self.mutator.disable(identity)
        groups = self.reader.list_groups(identity)
        if groups:
            self.mutator.remove_group_membership(identity, groups)
        self._append_note(record, f"quarantined, removed from {len(groups)} groups")
        self._settle()
        self.mutator.move(identity, self.leavers_container)
        log.info("Quarantined %s (%s groups removed)", record.account_name, len(groups))

    def delete(self, record: IdentityRecord) -> None:
        self._append_note(record, "deleted")
        self._settle()
        self.mutator.delete(record.path)
        log.info("Deleted %s", record.account_name)

    def _append_note(self, record: IdentityRecord, action: str) -> None:
        stamp = self.now_provider().astimezone(UTC).strftime("%Y-%m-%d %H:%M:%SZ")
        note = f"{stamp} idsync: {action}"
        existing = record.extension(INFO_ATTRIBUTE)
        text = f"{existing}\n{note}" if existing else note
        self.mutator.replace_attributes(record.path, {INFO_ATTRIBUTE: text})

    def _settle(self) -> None:
        # Heuristic pause for directory replication lag, not a synchronisation point.
        if self.settle_seconds > 0:
            self.sleep(self.settle_seconds)
