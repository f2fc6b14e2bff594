"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    """Mutation categories, declared in processing order."""

    UPDATE = "update"
    ADD = "add"
    REMOVE = "remove"


class Outcome(StrEnum):
    CREATED = "Created"
    CREATED_WITH_SUFFIX = "Created-WithSuffix"
    DUPLICATE = "Duplicate"
    UPDATED = "Updated"
    QUARANTINED = "Quarantined"
    DELETED = "Deleted"
    ABORTED = "Aborted"
    FAILED = "Failed"


class LifecycleState(StrEnum):
    """Managed removal states. "Active" is implicit and never stored."""

    QUARANTINED = "Quarantined"
    DELETED = "Deleted"
