"""Translate directory API payloads into domain identity records and back."""

from __future__ import annotations

from idsync.domain.model import IdentityRecord

from .schema import IdentityPayload


def parse_identity_model(payload: IdentityPayload) -> IdentityRecord:
    return IdentityRecord(
        identifier=payload.identifier.strip(),
        account_name=payload.account_name,
        mail=payload.mail,
        given_name=payload.given_name,
        surname=payload.surname,
        title=payload.title,
        office=payload.office,
        department=payload.department,
        city=payload.city,
        country=payload.country,
        enabled=payload.enabled,
        expires_at=payload.expires_at,
        path=payload.path,
        exemption=payload.exemption,
        extensions=dict(payload.extensions),
    )


def identity_to_payload(record: IdentityRecord) -> dict[str, object]:
    """Serialise ``record`` with the directory's attribute names."""

    model = IdentityPayload(
        identifier=record.identifier,
        account_name=record.account_name,
        path=record.path,
        mail=record.mail,
        given_name=record.given_name,
        surname=record.surname,
        title=record.title,
        office=record.office,
        department=record.department,
        city=record.city,
        country=record.country,
        enabled=record.enabled,
        expires_at=record.expires_at,
        exemption=record.exemption,
        extensions=dict(record.extensions),
    )
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
