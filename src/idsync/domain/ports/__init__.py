"""Domain port definitions for adapters."""

from __future__ import annotations

from .audit import AuditSink
from .directory import DirectoryMutator, DirectoryReader, IdCounter, TargetDirectory
from .notification import Notifier

__all__ = [
    "AuditSink",
    "DirectoryMutator",
    "DirectoryReader",
    "IdCounter",
    "Notifier",
    "TargetDirectory",
]
