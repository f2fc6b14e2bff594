"""Pydantic models describing the directory API payloads."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_blank(value: object) -> object:
    if value is None:
        return ""
    return value


class DirectoryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IdentityPayload(DirectoryBaseModel):
    identifier: str = Field(alias="employeeID")
    account_name: str = Field(alias="sAMAccountName")
    path: str = Field(alias="distinguishedName")
    mail: str = ""
    given_name: str = Field(default="", alias="givenName")
    surname: str = Field(default="", alias="sn")
    title: str = ""
    office: str = Field(default="", alias="physicalDeliveryOfficeName")
    department: str = ""
    city: str = Field(default="", alias="l")
    country: str = Field(default="", alias="co")
    enabled: bool = True
    expires_at: datetime | None = Field(default=None, alias="accountExpires")
    exemption: str | None = Field(default=None, alias="exemptFromRemoval")
    extensions: dict[str, str] = Field(
        default_factory=dict[str, str], alias="extensionAttributes"
    )

    _normalize_blank_strings = field_validator(
        "mail",
        "given_name",
        "surname",
        "title",
        "office",
        "department",
        "city",
        "country",
        mode="before",
    )(_none_to_blank)
    _normalize_optional = field_validator("expires_at", "exemption", mode="before")(
        _blank_to_none
    )

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("extensions", mode="before")
    @classmethod
    def _drop_null_extensions(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(key): str(item) for key, item in value.items() if item is not None}
        if value is None:
            return {}
        return value


class IdentityPage(DirectoryBaseModel):
    items: list[IdentityPayload]
    page: int = 1
    total_pages: int = Field(default=1, alias="totalPages")


class GroupList(DirectoryBaseModel):
    groups: list[str] = Field(default_factory=list[str])


class LookupResponse(DirectoryBaseModel):
    exists: bool


class AttributeValue(DirectoryBaseModel):
    value: str | None = None


class ErrorResponse(DirectoryBaseModel):
    error: str
    message: str = ""
