"""Partition two identity snapshots into add, matched and removal sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from idsync.domain.model import IdentityRecord

DEFAULT_EXEMPTION_SENTINEL = "TRUE"


@dataclass(frozen=True, slots=True)
class MatchedPair:
    source: IdentityRecord
    target: IdentityRecord

    @property
    def identifier(self) -> str:
        return self.source.identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationPlan:
    """Result of matching two snapshots by cross-domain identifier.

    Every source identifier lands in exactly one of ``to_add`` or ``matched``.
    Every target-only identifier lands in ``to_remove`` unless the record is
    exempt, in which case it lands in ``exempt``.
    """

    matched: tuple[MatchedPair, ...] = ()
    to_add: tuple[IdentityRecord, ...] = ()
    to_remove: tuple[IdentityRecord, ...] = ()
    exempt: tuple[IdentityRecord, ...] = ()


def reconcile(
    source: Iterable[IdentityRecord],
    target: Iterable[IdentityRecord],
    *,
    exemption_sentinel: str = DEFAULT_EXEMPTION_SENTINEL,
) -> ReconciliationPlan:
    """Match ``source`` against ``target`` using a hash index on the identifier.

    Pure function: output order follows input order, so the same snapshots
    always produce the same plan.
    """

    target_records = list(target)
    target_index = {record.identifier: record for record in target_records}

    matched: list[MatchedPair] = []
    to_add: list[IdentityRecord] = []
    seen: set[str] = set()
    for record in source:
        seen.add(record.identifier)
        counterpart = target_index.get(record.identifier)
        if counterpart is None:
            to_add.append(record)
        else:
            matched.append(MatchedPair(source=record, target=counterpart))

    to_remove: list[IdentityRecord] = []
    exempt: list[IdentityRecord] = []
    for record in target_records:
        if record.identifier in seen:
            continue
        if record.is_exempt(exemption_sentinel):
            exempt.append(record)
        else:
            to_remove.append(record)

    return ReconciliationPlan(
        matched=tuple(matched),
        to_add=tuple(to_add),
        to_remove=tuple(to_remove),
        exempt=tuple(exempt),
    )
