"""Provisioning of new target identities."""

from __future__ import annotations

from .allocation import NumericIdAllocator
from .naming import MAX_SUFFIX, AccountNameRegistry
from .passwords import PasswordPolicy, generate_password
from .provisioner import DuplicateIndex, IdentityProvisioner

__all__ = [
    "MAX_SUFFIX",
    "AccountNameRegistry",
    "DuplicateIndex",
    "IdentityProvisioner",
    "NumericIdAllocator",
    "PasswordPolicy",
    "generate_password",
]
