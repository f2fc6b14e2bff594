"""Declarative attribute table used by the differ and by change projection.

Every attribute the core compares or mutates is listed here with a reader that
renders it as a string and a writer that returns an updated copy of a record.
Extension attributes are open-ended and resolve to a binding over
``IdentityRecord.extensions``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from idsync.domain.model import ChangeRecord, IdentityRecord

ENABLED_ATTRIBUTE = "enabled"
PATH_ATTRIBUTE = "path"
EXPIRES_ATTRIBUTE = "accountExpires"


class AttributeMutation(StrEnum):
    """How an applied change reaches the target directory."""

    VALUE = "value"
    DISABLE = "disable"
    QUARANTINE = "quarantine"


@dataclass(frozen=True, slots=True)
class AttributeBinding:
    name: str
    read: Callable[[IdentityRecord], str]
    write: Callable[[IdentityRecord, str], IdentityRecord]
    mutation: AttributeMutation = AttributeMutation.VALUE


def _field_binding(name: str, field_name: str) -> AttributeBinding:
    def read(record: IdentityRecord) -> str:
        return getattr(record, field_name) or ""

    def write(record: IdentityRecord, value: str) -> IdentityRecord:
        return replace(record, **{field_name: value})

    return AttributeBinding(name=name, read=read, write=write)


def format_expiry(value: datetime | None) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).date().isoformat()


def parse_expiry(value: str) -> datetime | None:
    if not value:
        return None
    parsed = date.fromisoformat(value)
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=UTC)


def _write_expiry(record: IdentityRecord, value: str) -> IdentityRecord:
    return replace(record, expires_at=parse_expiry(value))


def _read_enabled(record: IdentityRecord) -> str:
    return str(record.enabled)


def _write_enabled(record: IdentityRecord, value: str) -> IdentityRecord:
    return replace(record, enabled=value == "True")


def rehome_path(path: str, container: str) -> str:
    """Return ``path`` with its leading RDN placed under ``container``."""

    leaf = path.split(",", 1)[0].strip() if path else ""
    return f"{leaf},{container}" if leaf else container


def _write_path(record: IdentityRecord, value: str) -> IdentityRecord:
    return replace(record, path=rehome_path(record.path, value))


def extension_binding(name: str) -> AttributeBinding:
    def read(record: IdentityRecord) -> str:
        return record.extension(name)

    def write(record: IdentityRecord, value: str) -> IdentityRecord:
        extensions = dict(record.extensions)
        if value:
            extensions[name] = value
        else:
            extensions.pop(name, None)
        return replace(record, extensions=extensions)

    return AttributeBinding(name=name, read=read, write=write)


# Comparison order of the differ; extension attributes follow these.
STANDARD_ATTRIBUTES: tuple[AttributeBinding, ...] = (
    _field_binding("givenName", "given_name"),
    _field_binding("sn", "surname"),
    _field_binding("mail", "mail"),
    _field_binding("title", "title"),
    _field_binding("physicalDeliveryOfficeName", "office"),
    _field_binding("department", "department"),
    _field_binding("l", "city"),
    _field_binding("co", "country"),
    AttributeBinding(
        name=EXPIRES_ATTRIBUTE,
        read=lambda record: format_expiry(record.expires_at),
        write=_write_expiry,
    ),
)

SPECIAL_ATTRIBUTES: tuple[AttributeBinding, ...] = (
    AttributeBinding(
        name=ENABLED_ATTRIBUTE,
        read=_read_enabled,
        write=_write_enabled,
        mutation=AttributeMutation.DISABLE,
    ),
    AttributeBinding(
        name=PATH_ATTRIBUTE,
        read=lambda record: record.path,
        write=_write_path,
        mutation=AttributeMutation.QUARANTINE,
    ),
)

ATTRIBUTE_TABLE: Mapping[str, AttributeBinding] = MappingProxyType(
    {binding.name: binding for binding in (*STANDARD_ATTRIBUTES, *SPECIAL_ATTRIBUTES)}
)


def binding_for(name: str) -> AttributeBinding:
    return ATTRIBUTE_TABLE.get(name) or extension_binding(name)


def compared_attributes(significant: Iterable[str]) -> tuple[AttributeBinding, ...]:
    """Return the ordered bindings the differ compares for ``significant`` extensions."""

    extensions = tuple(
        extension_binding(name)
        for name in dict.fromkeys(significant)
        if name not in ATTRIBUTE_TABLE
    )
    return (*STANDARD_ATTRIBUTES, *extensions)


def apply_changes(record: IdentityRecord, changes: Iterable[ChangeRecord]) -> IdentityRecord:
    """Project ``record`` forward by applying each change's new value in order."""

    updated = record
    for change in changes:
        updated = binding_for(change.attribute).write(updated, change.new_value)
    return updated
