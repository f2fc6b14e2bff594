from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from idsync.adapters.sqlalchemy import create_all_tables, shutdown, startup
from idsync.config import SyncConfig, Thresholds
from tests.helpers.directory import INACTIVE, LEAVERS, RecordingNotifier

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        inactive_container=INACTIVE,
        leavers_container=LEAVERS,
        source_leavers_marker="OU=Leavers",
        thresholds=Thresholds(add=10, update=10, remove=10),
        significant_attributes=("employeeType", "costCenter"),
        counter_attribute="uidNumber",
        uid_baseline=10000,
        settle_seconds=1.5,
        name_templates={"userPrincipalName": "{account_name}@corp.example"},
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def audit_store(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()
