"""Numeric-ID allocation against the shared external counter object."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from idsync.domain.errors import CounterUnavailableError

if TYPE_CHECKING:
    from idsync.domain.ports import IdCounter

log = getLogger(__name__)

DEFAULT_UID_BASELINE = 10000


@dataclass(slots=True)
class NumericIdAllocator:
    """Read-then-assign-then-write allocation of numeric account IDs.

    ``current()`` returns the value to assign to the next record; once that
    record exists ``commit()`` writes ``value + 1`` back to the counter. There
    is no cross-process locking (see ``IdCounter``). Within one run the
    allocator never goes below the last value it committed, even when the
    counter lags behind after a failed write. When the counter cannot be read
    the allocator degrades to that value, or to ``baseline`` when nothing was
    committed yet.
    """

    counter: IdCounter | None
    baseline: int = DEFAULT_UID_BASELINE
    _last_committed: int | None = field(default=None, init=False)

    def current(self) -> int:
        if self.counter is not None:
            try:
                value = self.counter.read()
            except CounterUnavailableError as exc:
                log.warning("ID counter unreadable (%s); using fallback", exc)
            else:
                if self._last_committed is not None and value < self._last_committed:
                    log.warning(
                        "ID counter at %s is behind last committed %s; using the latter",
                        value,
                        self._last_committed,
                    )
                    return self._last_committed
                return value
        else:
            log.warning("No ID counter configured; using fallback")
        if self._last_committed is not None:
            return self._last_committed
        return self.baseline

    def commit(self, assigned: int) -> int:
        """Record that ``assigned`` is now in use and return the next free value."""

        next_value = assigned + 1
        self._last_committed = next_value
        if self.counter is not None:
            self.counter.write(next_value)
        return next_value
