"""Attribute-level comparison of matched source/target identities."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from idsync.domain.model import ChangeRecord, path_contains, path_is_under

from .attributes import ENABLED_ATTRIBUTE, PATH_ATTRIBUTE, compared_attributes

if TYPE_CHECKING:
    from collections.abc import Iterable

    from idsync.domain.model import IdentityRecord

    from .partition import MatchedPair

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class AttributeDiffer:
    """Emit ordered change records that make a target identity follow its source.

    Values flow source -> target only. Two attributes are asymmetric:

    * ``enabled`` only ever propagates a disable (source disabled, target enabled).
    * ``path`` only ever propagates a move into the leavers container, when the
      source path carries the leaver marker and the target is not there yet.
    """

    leavers_container: str
    source_leavers_marker: str
    significant_attributes: tuple[str, ...] = ()

    def diff(self, source: IdentityRecord, target: IdentityRecord) -> list[ChangeRecord]:
        changes: list[ChangeRecord] = []
        for binding in compared_attributes(self.significant_attributes):
            new_value = binding.read(source)
            old_value = binding.read(target)
            if new_value != old_value:
                changes.append(self._change(target, binding.name, new_value, old_value))

        if not source.enabled and target.enabled:
            changes.append(self._change(target, ENABLED_ATTRIBUTE, "False", "True"))

        if path_contains(source.path, self.source_leavers_marker) and not path_is_under(
            target.path, self.leavers_container
        ):
            changes.append(
                self._change(target, PATH_ATTRIBUTE, self.leavers_container, target.path)
            )

        return changes

    def diff_pairs(self, pairs: Iterable[MatchedPair]) -> dict[str, list[ChangeRecord]]:
        """Diff every pair, keyed by identifier, dropping pairs without changes."""

        changes_by_identifier: dict[str, list[ChangeRecord]] = {}
        for pair in pairs:
            changes = self.diff(pair.source, pair.target)
            if changes:
                changes_by_identifier[pair.identifier] = changes
        log.debug("Differ found changes on %s matched identities", len(changes_by_identifier))
        return changes_by_identifier

    @staticmethod
    def _change(
        target: IdentityRecord, attribute: str, new_value: str, old_value: str
    ) -> ChangeRecord:
        return ChangeRecord(
            target_path=target.path,
            account_name=target.account_name,
            attribute=attribute,
            new_value=new_value,
            old_value=old_value,
        )
