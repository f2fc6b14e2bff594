"""SQLAlchemy-backed append-only audit export."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, insert, select
from sqlalchemy.orm import Session, sessionmaker

from idsync.domain.model import Category, ChangeRecord, MutationResult, Outcome

from .tables import change_record_table, create_all_tables, mutation_result_table

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from sqlalchemy.engine import Engine

    from idsync.domain.ports import AuditSink


class StartupError(RuntimeError):
    """Raised when the audit store is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "Audit store not initialised. Call idsync.adapters.sqlalchemy."
                "audit.startup() before recording a run."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the audit engine, tables and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError("Audit store already initialised. Pass force=True to reconfigure.")
    if engine is None and database_uri is None:
        raise StartupError("startup() needs an engine or a database URI")

    resolved_engine = engine or create_engine(database_uri or "", future=True)
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    return _STATE.engine


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyAuditSink:
    """Append change records and mutation results of each category to SQL tables."""

    def __init__(self, *, now_provider: Callable[[], datetime] = _utcnow) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.now_provider = now_provider

    def record(
        self,
        run_id: UUID,
        category: Category,
        changes: Sequence[ChangeRecord],
        results: Sequence[MutationResult],
    ) -> None:
        recorded_at = self.now_provider()
        change_rows = [
            {
                "run_id": run_id,
                "category": str(category),
                "position": position,
                "recorded_at": recorded_at,
                "target_path": change.target_path,
                "account_name": change.account_name,
                "attribute": change.attribute,
                "new_value": change.new_value,
                "old_value": change.old_value,
            }
            for position, change in enumerate(changes)
        ]
        result_rows = [
            {
                "run_id": run_id,
                "category": str(result.category),
                "position": position,
                "recorded_at": recorded_at,
                "account_name": result.account_name,
                "identifier": result.identifier,
                "success": result.success,
                "outcome": str(result.outcome),
                "detail": result.detail,
            }
            for position, result in enumerate(results)
        ]
        with self.session_factory() as session:
            if change_rows:
                session.execute(insert(change_record_table), change_rows)
            if result_rows:
                session.execute(insert(mutation_result_table), result_rows)
            session.commit()

    def changes_for_run(self, run_id: UUID) -> list[ChangeRecord]:
        statement = (
            select(change_record_table)
            .where(change_record_table.c.run_id == run_id)
            .order_by(change_record_table.c.id)
        )
        with self.session_factory() as session:
            rows = session.execute(statement).mappings().all()
        return [
            ChangeRecord(
                target_path=row["target_path"],
                account_name=row["account_name"],
                attribute=row["attribute"],
                new_value=row["new_value"],
                old_value=row["old_value"],
            )
            for row in rows
        ]

    def results_for_run(self, run_id: UUID) -> list[MutationResult]:
        statement = (
            select(mutation_result_table)
            .where(mutation_result_table.c.run_id == run_id)
            .order_by(mutation_result_table.c.id)
        )
        with self.session_factory() as session:
            rows = session.execute(statement).mappings().all()
        return [
            MutationResult(
                category=Category(row["category"]),
                account_name=row["account_name"],
                identifier=row["identifier"],
                success=row["success"],
                outcome=Outcome(row["outcome"]),
                detail=row["detail"],
            )
            for row in rows
        ]


if TYPE_CHECKING:
    _sink_check: AuditSink = SqlAlchemyAuditSink()
