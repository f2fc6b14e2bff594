"""Account-name collision resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from idsync.domain.errors import AccountNameExhaustedError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

MAX_SUFFIX = 99


@dataclass(slots=True)
class AccountNameRegistry:
    """Tracks account names that are unavailable for the rest of a run.

    Names are compared case-insensitively. ``lookup`` is an optional live
    check against the directory for names the snapshot does not contain
    (for instance excluded service accounts).
    """

    lookup: Callable[[str], bool] | None = None
    _taken: set[str] = field(default_factory=set[str])

    @classmethod
    def from_names(
        cls, names: Iterable[str], *, lookup: Callable[[str], bool] | None = None
    ) -> AccountNameRegistry:
        registry = cls(lookup=lookup)
        for name in names:
            registry.reserve(name)
        return registry

    def is_taken(self, name: str) -> bool:
        if name.casefold() in self._taken:
            return True
        return self.lookup is not None and self.lookup(name)

    def reserve(self, name: str) -> None:
        if name:
            self._taken.add(name.casefold())

    def resolve(self, base: str) -> str:
        """Return ``base`` or the first free ``base01``, ``base02``, ... variant."""

        if not self.is_taken(base):
            return base
        for suffix in range(1, MAX_SUFFIX + 1):
            candidate = f"{base}{suffix:02d}"
            if not self.is_taken(candidate):
                return candidate
        raise AccountNameExhaustedError(base, MAX_SUFFIX)
