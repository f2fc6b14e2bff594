"""SQLAlchemy table metadata for the audit export."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

change_record_table = Table(
    "change_record",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("run_id", UUIDColumnType, nullable=False),
    Column("category", String(16), nullable=False),
    Column("position", Integer, nullable=False),
    Column("recorded_at", UTCDateTime, nullable=False),
    Column("target_path", Text, nullable=False),
    Column("account_name", String(256), nullable=False),
    Column("attribute", String(128), nullable=False),
    Column("new_value", Text, nullable=False),
    Column("old_value", Text, nullable=False),
    Index("ix_change_record_run", "run_id", "category"),
)

mutation_result_table = Table(
    "mutation_result",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("run_id", UUIDColumnType, nullable=False),
    Column("category", String(16), nullable=False),
    Column("position", Integer, nullable=False),
    Column("recorded_at", UTCDateTime, nullable=False),
    Column("account_name", String(256), nullable=False),
    Column("identifier", String(256), nullable=True),
    Column("success", Boolean, nullable=False),
    Column("outcome", String(32), nullable=False),
    Column("detail", Text, nullable=True),
    Index("ix_mutation_result_run", "run_id", "category"),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine, checkfirst=True)
