"""Public interface for the directory REST adapter."""

from __future__ import annotations

from .client import DirectoryAPIError, HttpDirectory, HttpIdCounter
from .schema import IdentityPage, IdentityPayload
from .translator import identity_to_payload, parse_identity_model

__all__ = [
    "DirectoryAPIError",
    "HttpDirectory",
    "HttpIdCounter",
    "IdentityPage",
    "IdentityPayload",
    "identity_to_payload",
    "parse_identity_model",
]
