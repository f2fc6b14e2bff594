"""SQLAlchemy adapter package for the audit export."""

from __future__ import annotations

from .audit import (
    SqlAlchemyAuditSink,
    StartupError,
    configured_engine,
    shutdown,
    startup,
)
from .tables import change_record_table, create_all_tables, metadata, mutation_result_table

__all__ = [
    "SqlAlchemyAuditSink",
    "StartupError",
    "change_record_table",
    "configured_engine",
    "create_all_tables",
    "metadata",
    "mutation_result_table",
    "shutdown",
    "startup",
]
