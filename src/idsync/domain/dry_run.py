"""Simulating stand-ins for the mutating ports, used in dry-run mode."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from idsync.domain.model import IdentityRecord
    from idsync.domain.ports import DirectoryMutator, IdCounter

log = getLogger(__name__)


@dataclass(slots=True)
class SimulatedCall:
    operation: str
    identity: str
    argument: object = None


@dataclass(slots=True)
class SimulatedDirectoryMutator:
    """Log and record every mutation instead of sending it."""

    calls: list[SimulatedCall] = field(default_factory=list[SimulatedCall])

    def _record(self, operation: str, identity: str, argument: object = None) -> None:
        self.calls.append(SimulatedCall(operation, identity, argument))
        log.info("[dry-run] %s %s %s", operation, identity, "" if argument is None else argument)

    def create(self, record: IdentityRecord, password: str) -> None:  # noqa: ARG002
        self._record("create", record.path)

    def replace_attributes(self, identity: str, values: Mapping[str, str]) -> None:
        self._record("replace_attributes", identity, dict(values))

    def clear_attributes(self, identity: str, names: Sequence[str]) -> None:
        self._record("clear_attributes", identity, list(names))

    def disable(self, identity: str) -> None:
        self._record("disable", identity)

    def move(self, identity: str, target_path: str) -> None:
        self._record("move", identity, target_path)

    def delete(self, identity: str) -> None:
        self._record("delete", identity)

    def remove_group_membership(self, identity: str, groups: Sequence[str]) -> None:
        self._record("remove_group_membership", identity, list(groups))


@dataclass(slots=True)
class SimulatedIdCounter:
    """Read through to the real counter until the first simulated write.

    After a write the simulated value shadows the real one, so allocations in
    the rest of a dry run match what an apply run would assign.
    """

    delegate: IdCounter
    shadow: int | None = None

    def read(self) -> int:
        if self.shadow is not None:
            return self.shadow
        return self.delegate.read()

    def write(self, value: int) -> None:
        log.info("[dry-run] counter write %s", value)
        self.shadow = value


if TYPE_CHECKING:
    _mutator_check: DirectoryMutator = SimulatedDirectoryMutator()
