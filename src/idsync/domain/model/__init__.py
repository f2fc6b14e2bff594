"""Domain model package."""

from __future__ import annotations

from .enums import Category, LifecycleState, Outcome
from .identity import IdentityRecord, path_contains, path_is_under
from .results import ChangeRecord, MutationResult

__all__ = [
    "Category",
    "ChangeRecord",
    "IdentityRecord",
    "LifecycleState",
    "MutationResult",
    "Outcome",
    "path_contains",
    "path_is_under",
]
