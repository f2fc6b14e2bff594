from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from idsync.adapters.sqlalchemy import configured_engine, shutdown
from idsync.app import run_directory_sync
from idsync.domain.errors import DuplicateIdentifierError, ExtractionError
from idsync.domain.model import Outcome
from tests.helpers.directory import (
    SOURCE_STAFF,
    FakeCounter,
    InMemoryDirectory,
    RecordingAuditSink,
    make_identity,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from idsync.config import SyncConfig
    from idsync.domain.model import IdentityRecord
    from tests.helpers.directory import RecordingNotifier


class FailingSource(InMemoryDirectory):
    def fetch_identities(self) -> list[IdentityRecord]:
        raise ExtractionError("source", "connection refused")


def test_run_extracts_filters_and_reconciles(
    sync_config: SyncConfig, notifier: RecordingNotifier
) -> None:
    config = replace(
        sync_config,
        excluded_accounts=("svc-*",),
        settle_seconds=0,
    )
    source = InMemoryDirectory.with_records(
        [
            make_identity("2", "newbie", container=SOURCE_STAFF),
            make_identity("1", "jdoe", container=SOURCE_STAFF),
        ]
    )
    target = InMemoryDirectory.with_records(
        [make_identity("1", "jdoe"), make_identity("9", "svc-backup")]
    )
    audit = RecordingAuditSink()

    report = run_directory_sync(
        dry_run=False,
        config=config,
        source=source,
        target=target,
        counter=FakeCounter(value=300),
        notifier=notifier,
        audit=audit,
    )

    assert [(r.account_name, r.outcome) for r in report.results] == [
        ("newbie", Outcome.CREATED)
    ]
    assert report.plan.to_remove == ()
    assert len(audit.entries) == 3
    assert target.operations() == ["create"]


def test_dry_run_is_the_default(sync_config: SyncConfig, notifier: RecordingNotifier) -> None:
    source = InMemoryDirectory.with_records([make_identity("2", container=SOURCE_STAFF)])
    target = InMemoryDirectory()

    report = run_directory_sync(
        config=sync_config,
        source=source,
        target=target,
        notifier=notifier,
        audit=RecordingAuditSink(),
    )

    assert report.dry_run
    assert target.calls == []
    assert report.results[0].outcome is Outcome.CREATED


def test_extraction_failure_notifies_and_raises(
    sync_config: SyncConfig, notifier: RecordingNotifier
) -> None:
    target = InMemoryDirectory()

    with pytest.raises(ExtractionError):
        run_directory_sync(
            dry_run=False,
            config=sync_config,
            source=FailingSource(),
            target=target,
            notifier=notifier,
            audit=RecordingAuditSink(),
        )

    assert notifier.subjects == ["Directory sync aborted"]
    assert "connection refused" in notifier.messages[0][1]
    assert target.calls == []


def test_duplicate_identifiers_abort_before_any_change(
    sync_config: SyncConfig, notifier: RecordingNotifier
) -> None:
    source = InMemoryDirectory.with_records(
        [make_identity("1", "a", container=SOURCE_STAFF), make_identity("1", "b")]
    )
    target = InMemoryDirectory()

    with pytest.raises(DuplicateIdentifierError):
        run_directory_sync(
            config=sync_config,
            source=source,
            target=target,
            notifier=notifier,
            audit=RecordingAuditSink(),
        )

    assert notifier.subjects == ["[dry-run] Directory sync aborted"]


def test_audit_engine_started_for_the_run_is_released(
    sync_config: SyncConfig, notifier: RecordingNotifier, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    shutdown()

    report = run_directory_sync(
        config=sync_config,
        source=InMemoryDirectory.with_records([make_identity("2", container=SOURCE_STAFF)]),
        target=InMemoryDirectory(),
        notifier=notifier,
    )

    assert report.results[0].outcome is Outcome.CREATED
    assert configured_engine() is None


def test_preconfigured_audit_engine_is_left_running(
    sync_config: SyncConfig, notifier: RecordingNotifier, audit_store: Engine
) -> None:
    run_directory_sync(
        config=sync_config,
        source=InMemoryDirectory.with_records([make_identity("2", container=SOURCE_STAFF)]),
        target=InMemoryDirectory(),
        notifier=notifier,
    )

    assert configured_engine() is audit_store
