"""Ports for reading from and mutating a directory domain."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from idsync.domain.model import IdentityRecord


@runtime_checkable
class DirectoryReader(Protocol):
    """Read-only access to one directory domain.

    Reads are permitted in dry-run mode; nothing here may change state.
    """

    def fetch_identities(self) -> list[IdentityRecord]: ...

    def list_groups(self, identity: str) -> list[str]: ...

    def account_name_exists(self, account_name: str) -> bool: ...


@runtime_checkable
class DirectoryMutator(Protocol):
    """Mutation calls against the target directory.

    ``identity`` is the record's directory path. Every call is synchronous and
    may raise; callers treat a raise as a failure of the record being processed.
    """

    def create(self, record: IdentityRecord, password: str) -> None: ...

    def replace_attributes(self, identity: str, values: Mapping[str, str]) -> None: ...

    def clear_attributes(self, identity: str, names: Sequence[str]) -> None: ...

    def disable(self, identity: str) -> None: ...

    def move(self, identity: str, target_path: str) -> None: ...

    def delete(self, identity: str) -> None: ...

    def remove_group_membership(self, identity: str, groups: Sequence[str]) -> None: ...


@runtime_checkable
class IdCounter(Protocol):
    """Shared monotonic numeric-ID counter stored on an external directory object.

    Contract: single writer. The read/assign/write sequence is not atomic and
    no locking is attempted; the scheduler must guarantee that only one
    provisioning run is active at a time.
    """

    def read(self) -> int:
        """Return the next unassigned value or raise ``CounterUnavailableError``."""
        ...

    def write(self, value: int) -> None: ...


@runtime_checkable
class TargetDirectory(DirectoryReader, DirectoryMutator, Protocol):
    """The target domain is both read (snapshot, groups, names) and mutated."""
