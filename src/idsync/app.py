"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import ExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from idsync.adapters.directory import HttpDirectory, HttpIdCounter
from idsync.adapters.notification import build_notifier
from idsync.adapters.sqlalchemy import (
    SqlAlchemyAuditSink,
    configured_engine,
    shutdown,
    startup,
)
from idsync.config import (
    get_database_config,
    get_directory_config,
    get_smtp_config,
    get_sync_config,
)
from idsync.domain.errors import FatalSyncError
from idsync.domain.orchestrator import SyncOrchestrator
from idsync.domain.reconciliation import prepare_snapshot

if TYPE_CHECKING:
    from idsync.config import SyncConfig
    from idsync.domain.model import IdentityRecord
    from idsync.domain.orchestrator import SyncReport
    from idsync.domain.ports import (
        AuditSink,
        DirectoryReader,
        IdCounter,
        Notifier,
        TargetDirectory,
    )

log = getLogger(__name__)


def _default_audit_sink(stack: ExitStack) -> AuditSink:
    if configured_engine() is None:
        startup(database_uri=get_database_config().uri)
        stack.callback(shutdown)
    return SqlAlchemyAuditSink()


def extract_snapshots(
    source: DirectoryReader,
    target: DirectoryReader,
    *,
    config: SyncConfig,
) -> tuple[tuple[IdentityRecord, ...], tuple[IdentityRecord, ...]]:
    """Extract and prepare both snapshots; any failure here is fatal for the run."""

    source_snapshot = prepare_snapshot(
        source.fetch_identities(),
        domain="source",
        excluded_accounts=config.excluded_accounts,
    )
    target_snapshot = prepare_snapshot(
        target.fetch_identities(),
        domain="target",
        excluded_accounts=config.excluded_accounts,
    )
    return source_snapshot, target_snapshot


def run_directory_sync(
    *,
    dry_run: bool = True,
    config: SyncConfig | None = None,
    source: DirectoryReader | None = None,
    target: TargetDirectory | None = None,
    counter: IdCounter | None = None,
    notifier: Notifier | None = None,
    audit: AuditSink | None = None,
) -> SyncReport:
    """Run one reconciliation using the configured adapters.

    Adapters that are not supplied are built from the environment. Fatal
    pre-flight failures notify the operators and re-raise.
    """

    effective_config = config or get_sync_config()
    effective_notifier = notifier or build_notifier(get_smtp_config())

    with ExitStack() as stack:
        effective_source = source or stack.enter_context(
            HttpDirectory(get_directory_config("source"))
        )
        if target is None:
            http_target = stack.enter_context(HttpDirectory(get_directory_config("target")))
            effective_target: TargetDirectory = http_target
            if counter is None and effective_config.counter_object:
                counter = HttpIdCounter(
                    http_target,
                    effective_config.counter_object,
                    effective_config.counter_attribute,
                )
        else:
            effective_target = target
        effective_audit = audit or _default_audit_sink(stack)

        log.info("Starting directory sync (%s)", "dry-run" if dry_run else "apply")
        try:
            source_snapshot, target_snapshot = extract_snapshots(
                effective_source, effective_target, config=effective_config
            )
        except FatalSyncError as exc:
            log.exception("Directory sync aborted before any change")
            prefix = "[dry-run] " if dry_run else ""
            effective_notifier.send(f"{prefix}Directory sync aborted", str(exc))
            raise

        orchestrator = SyncOrchestrator(
            config=effective_config,
            mutator=effective_target,
            reader=effective_target,
            notifier=effective_notifier,
            counter=counter,
            audit=effective_audit,
            dry_run=dry_run,
        )
        report = orchestrator.run(source_snapshot, target_snapshot)

    log.info(
        "Finished directory sync %s: %s changes, %s results, aborted categories: %s",
        report.run_id,
        len(report.changes),
        len(report.results),
        ", ".join(report.aborted_categories) or "none",
    )
    return report
