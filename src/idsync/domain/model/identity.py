"""Identity snapshot records shared by both directory domains."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


def _normalize_dn(value: str) -> str:
    return ",".join(part.strip() for part in value.split(",")).casefold()


def path_is_under(path: str, container: str) -> bool:
    """Return whether ``path`` is ``container`` itself or sits below it.

    Paths are distinguished-name style strings (``CN=x,OU=y,DC=z``); the
    comparison ignores case and whitespace around the RDN separators.
    """

    if not path or not container:
        return False
    normalized_path = _normalize_dn(path)
    normalized_container = _normalize_dn(container)
    return normalized_path == normalized_container or normalized_path.endswith(
        "," + normalized_container
    )


def path_contains(path: str, marker: str) -> bool:
    """Return whether any RDN sequence of ``path`` matches ``marker``."""

    if not path or not marker:
        return False
    return ("," + _normalize_dn(path) + ",").find("," + _normalize_dn(marker) + ",") >= 0


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentityRecord:
    """One account as observed in a directory snapshot.

    ``identifier`` correlates the same person across both domains and is
    unique within a snapshot. ``path`` doubles as the handle passed to the
    directory mutation port.
    """

    identifier: str
    account_name: str
    mail: str = ""
    given_name: str = ""
    surname: str = ""
    title: str = ""
    office: str = ""
    department: str = ""
    city: str = ""
    country: str = ""
    enabled: bool = True
    expires_at: datetime | None = None
    path: str = ""
    exemption: str | None = None
    extensions: Mapping[str, str] = field(default_factory=dict[str, str])

    def __post_init__(self) -> None:
        if not self.identifier or not self.identifier.strip():
            raise ValueError("Identity records require a cross-domain identifier")

    def is_exempt(self, sentinel: str) -> bool:
        if self.exemption is None:
            return False
        return self.exemption.strip().casefold() == sentinel.strip().casefold()

    def extension(self, name: str) -> str:
        return self.extensions.get(name, "")
