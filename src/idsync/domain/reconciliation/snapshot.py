"""Preparation of extracted directory collections into run snapshots."""

from __future__ import annotations

from collections import Counter
from fnmatch import fnmatchcase
from logging import getLogger
from typing import TYPE_CHECKING

from idsync.domain.errors import DuplicateIdentifierError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from idsync.domain.model import IdentityRecord

log = getLogger(__name__)


def is_excluded(record: IdentityRecord, patterns: Sequence[str]) -> bool:
    """Return whether the account name matches one of the exclusion patterns."""

    name = record.account_name.casefold()
    return any(fnmatchcase(name, pattern.casefold()) for pattern in patterns)


def prepare_snapshot(
    records: Iterable[IdentityRecord],
    *,
    domain: str,
    excluded_accounts: Sequence[str] = (),
) -> tuple[IdentityRecord, ...]:
    """Filter test/service accounts, sort by identifier and enforce uniqueness."""

    kept: list[IdentityRecord] = []
    skipped = 0
    for record in records:
        if is_excluded(record, excluded_accounts):
            skipped += 1
            continue
        kept.append(record)

    counts = Counter(record.identifier for record in kept)
    duplicates = sorted(identifier for identifier, count in counts.items() if count > 1)
    if duplicates:
        raise DuplicateIdentifierError(domain, duplicates)

    kept.sort(key=lambda record: record.identifier)
    log.info("Prepared %s snapshot: %s records (%s excluded)", domain, len(kept), skipped)
    return tuple(kept)
