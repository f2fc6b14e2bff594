"""Reconciliation core: snapshot matching and attribute diffing.

Flow for one run:
1) prepare each extracted collection into a sorted, filtered snapshot
2) partition the snapshots by cross-domain identifier
3) diff every matched pair into ordered change records
"""

from __future__ import annotations

from .attributes import (
    ATTRIBUTE_TABLE,
    ENABLED_ATTRIBUTE,
    PATH_ATTRIBUTE,
    AttributeBinding,
    AttributeMutation,
    apply_changes,
    binding_for,
)
from .differ import AttributeDiffer
from .partition import MatchedPair, ReconciliationPlan, reconcile
from .snapshot import prepare_snapshot

__all__ = [
    "ATTRIBUTE_TABLE",
    "ENABLED_ATTRIBUTE",
    "PATH_ATTRIBUTE",
    "AttributeBinding",
    "AttributeDiffer",
    "AttributeMutation",
    "MatchedPair",
    "ReconciliationPlan",
    "apply_changes",
    "binding_for",
    "prepare_snapshot",
    "reconcile",
]
