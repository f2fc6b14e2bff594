"""Creation of target identities for source records without a counterpart."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from idsync.domain.model import Category, MutationResult, Outcome

from .naming import AccountNameRegistry
from .passwords import generate_password

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from idsync.domain.model import IdentityRecord
    from idsync.domain.ports import DirectoryMutator

    from .allocation import NumericIdAllocator

log = getLogger(__name__)

DEFAULT_COUNTER_ATTRIBUTE = "uidNumber"


def _mail_key(mail: str) -> str:
    return mail.strip().casefold()


@dataclass(slots=True)
class DuplicateIndex:
    """Alternate keys (mail, identifier) already present in the target domain."""

    mails: set[str] = field(default_factory=set[str])
    identifiers: set[str] = field(default_factory=set[str])

    @classmethod
    def from_records(cls, records: Iterable[IdentityRecord]) -> DuplicateIndex:
        index = cls()
        for record in records:
            index.add(record)
        return index

    def add(self, record: IdentityRecord) -> None:
        self.identifiers.add(record.identifier)
        if record.mail.strip():
            self.mails.add(_mail_key(record.mail))

    def match(self, record: IdentityRecord) -> str | None:
        """Return which alternate key collides, if any."""

        if record.identifier in self.identifiers:
            return f"identifier {record.identifier}"
        if record.mail.strip() and _mail_key(record.mail) in self.mails:
            return f"mail {record.mail}"
        return None


@dataclass(slots=True, kw_only=True)
class IdentityProvisioner:
    """Build and create one disabled target identity per source record.

    New accounts always land disabled in ``inactive_container``. Existing
    records are never overwritten: an alternate-key collision reports
    ``Duplicate`` and skips creation.
    """

    mutator: DirectoryMutator
    allocator: NumericIdAllocator
    names: AccountNameRegistry
    duplicates: DuplicateIndex
    inactive_container: str
    counter_attribute: str = DEFAULT_COUNTER_ATTRIBUTE
    name_templates: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    password_factory: Callable[[], str] = generate_password

    def provision(self, source: IdentityRecord) -> MutationResult:
        collision = self.duplicates.match(source)
        if collision is not None:
            log.info("Skipping %s: duplicate %s", source.account_name, collision)
            return MutationResult(
                category=Category.ADD,
                account_name=source.account_name,
                identifier=source.identifier,
                success=True,
                outcome=Outcome.DUPLICATE,
                detail=f"existing record with {collision}",
            )

        account_name = self.names.resolve(source.account_name)
        uid = self.allocator.current()
        record = self.build_record(source, account_name=account_name, uid=uid)

        self.mutator.create(record, self.password_factory())
        self.names.reserve(account_name)
        self.duplicates.add(record)
        self.allocator.commit(uid)

        suffixed = account_name != source.account_name
        log.info(
            "Created %s (uid %s)%s",
            account_name,
            uid,
            f" for requested name {source.account_name}" if suffixed else "",
        )
        return MutationResult(
            category=Category.ADD,
            account_name=account_name,
            identifier=source.identifier,
            success=True,
            outcome=Outcome.CREATED_WITH_SUFFIX if suffixed else Outcome.CREATED,
            detail=f"{self.counter_attribute}={uid}",
        )

    def build_record(
        self, source: IdentityRecord, *, account_name: str, uid: int
    ) -> IdentityRecord:
        """Return the record to create, with every name-derived attribute rewritten."""

        extensions = dict(source.extensions)
        for attribute, template in self.name_templates.items():
            extensions[attribute] = template.format(account_name=account_name)
        extensions[self.counter_attribute] = str(uid)
        return replace(
            source,
            account_name=account_name,
            enabled=False,
            path=f"CN={account_name},{self.inactive_container}",
            exemption=None,
            extensions=extensions,
        )
