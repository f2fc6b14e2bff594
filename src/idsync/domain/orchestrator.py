"""Run-level composition of reconciliation, safety gate and mutation stages.

One run processes the fixed category sequence update -> add -> remove. Each
category is gated as a whole before any of its mutations is attempted; inside
a category records are processed one at a time and a failure on one record is
captured in its result without stopping the rest.
"""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from idsync.domain.dry_run import SimulatedDirectoryMutator, SimulatedIdCounter
from idsync.domain.lifecycle import LifecycleEngine
from idsync.domain.model import Category, MutationResult, Outcome
from idsync.domain.provisioning import (
    AccountNameRegistry,
    DuplicateIndex,
    IdentityProvisioner,
    NumericIdAllocator,
    generate_password,
)
from idsync.domain.reconciliation import (
    AttributeDiffer,
    AttributeMutation,
    ReconciliationPlan,
    apply_changes,
    binding_for,
    reconcile,
)
from idsync.domain.safety import GateDecision, SafetyGate

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from idsync.config.sync import SyncConfig
    from idsync.domain.model import ChangeRecord, IdentityRecord
    from idsync.domain.ports import (
        AuditSink,
        DirectoryMutator,
        DirectoryReader,
        IdCounter,
        Notifier,
    )

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _no_sleep(_seconds: float) -> None:
    return None


@dataclass(slots=True)
class CategoryReport:
    category: Category
    decision: GateDecision | None = None
    changes: list[ChangeRecord] = field(default_factory=list["ChangeRecord"])
    results: list[MutationResult] = field(default_factory=list[MutationResult])

    @property
    def aborted(self) -> bool:
        return self.decision is not None and not self.decision.allowed

    @property
    def failures(self) -> list[MutationResult]:
        return [result for result in self.results if result.outcome is Outcome.FAILED]

    def outcome_counts(self) -> dict[str, int]:
        return dict(Counter(str(result.outcome) for result in self.results))


@dataclass(slots=True)
class SyncReport:
    run_id: UUID
    dry_run: bool
    started_at: datetime
    plan: ReconciliationPlan
    categories: dict[Category, CategoryReport] = field(
        default_factory=dict[Category, CategoryReport]
    )

    @property
    def results(self) -> list[MutationResult]:
        return [result for report in self.categories.values() for result in report.results]

    @property
    def changes(self) -> list[ChangeRecord]:
        return [change for report in self.categories.values() for change in report.changes]

    @property
    def aborted_categories(self) -> tuple[Category, ...]:
        return tuple(category for category, report in self.categories.items() if report.aborted)


@dataclass(slots=True, kw_only=True)
class SyncOrchestrator:
    """Drive one reconciliation run against injected directory ports.

    In dry-run mode the mutator and the ID counter are swapped for simulating
    wrappers; every other step runs exactly as in apply mode so the report
    predicts what an apply run would do.
    """

    config: SyncConfig
    mutator: DirectoryMutator
    reader: DirectoryReader
    notifier: Notifier
    counter: IdCounter | None = None
    audit: AuditSink | None = None
    dry_run: bool = True
    sleep: Callable[[float], None] = time.sleep
    now_provider: Callable[[], datetime] = field(default=_utcnow)
    password_factory: Callable[[], str] = generate_password

    def run(
        self,
        source: Sequence[IdentityRecord],
        target: Sequence[IdentityRecord],
    ) -> SyncReport:
        mutator: DirectoryMutator = SimulatedDirectoryMutator() if self.dry_run else self.mutator
        counter: IdCounter | None = self.counter
        if self.dry_run and counter is not None:
            counter = SimulatedIdCounter(counter)

        plan = reconcile(source, target, exemption_sentinel=self.config.exemption_sentinel)
        report = SyncReport(
            run_id=uuid4(),
            dry_run=self.dry_run,
            started_at=self.now_provider(),
            plan=plan,
        )
        log.info(
            "Run %s (%s): %s matched, %s to add, %s to remove, %s exempt",
            report.run_id,
            "dry-run" if self.dry_run else "apply",
            len(plan.matched),
            len(plan.to_add),
            len(plan.to_remove),
            len(plan.exempt),
        )

        lifecycle = LifecycleEngine(
            mutator=mutator,
            reader=self.reader,
            leavers_container=self.config.leavers_container,
            settle_seconds=self.config.settle_seconds,
            sleep=_no_sleep if self.dry_run else self.sleep,
            now_provider=self.now_provider,
        )
        gate = SafetyGate(self.config.thresholds)

        update = self._run_updates(plan, gate, mutator, lifecycle)
        self._finish_category(report, update)

        provisioner = IdentityProvisioner(
            mutator=mutator,
            allocator=NumericIdAllocator(counter, baseline=self.config.uid_baseline),
            names=AccountNameRegistry.from_names(
                (record.account_name for record in target),
                lookup=self.reader.account_name_exists,
            ),
            duplicates=DuplicateIndex.from_records(target),
            inactive_container=self.config.inactive_container,
            counter_attribute=self.config.counter_attribute,
            name_templates=self.config.name_templates,
            password_factory=self.password_factory,
        )
        add = self._run_adds(plan, gate, provisioner)
        self._finish_category(report, add)

        remove = self._run_removals(plan, gate, lifecycle)
        self._finish_category(report, remove)

        for category, category_report in report.categories.items():
            log.info("Category %s finished: %s", category, category_report.outcome_counts())
        return report

    # Categories ------------------------------------------------------------

    def _run_updates(
        self,
        plan: ReconciliationPlan,
        gate: SafetyGate,
        mutator: DirectoryMutator,
        lifecycle: LifecycleEngine,
    ) -> CategoryReport:
        differ = AttributeDiffer(
            leavers_container=self.config.leavers_container,
            source_leavers_marker=self.config.source_leavers_marker,
            significant_attributes=self.config.significant_attributes,
        )
        changes_by_identifier = differ.diff_pairs(plan.matched)
        pairs = [pair for pair in plan.matched if pair.identifier in changes_by_identifier]

        report = CategoryReport(Category.UPDATE)
        for pair in pairs:
            report.changes.extend(changes_by_identifier[pair.identifier])

        targets = [pair.target for pair in pairs]
        if not self._gate(report, gate, targets):
            return report

        for pair in pairs:
            changes = changes_by_identifier[pair.identifier]
            try:
                result = self._apply_update(pair.target, changes, mutator, lifecycle)
            except Exception as exc:  # noqa: BLE001
                result = self._failure(Category.UPDATE, pair.target, exc)
            report.results.append(result)
        return report

    def _run_adds(
        self,
        plan: ReconciliationPlan,
        gate: SafetyGate,
        provisioner: IdentityProvisioner,
    ) -> CategoryReport:
        report = CategoryReport(Category.ADD)
        if not self._gate(report, gate, plan.to_add):
            return report
        for record in plan.to_add:
            try:
                result = provisioner.provision(record)
            except Exception as exc:  # noqa: BLE001
                result = self._failure(Category.ADD, record, exc)
            report.results.append(result)
        return report

    def _run_removals(
        self,
        plan: ReconciliationPlan,
        gate: SafetyGate,
        lifecycle: LifecycleEngine,
    ) -> CategoryReport:
        report = CategoryReport(Category.REMOVE)
        if not self._gate(report, gate, plan.to_remove):
            return report
        for record in plan.to_remove:
            try:
                result = lifecycle.process(record)
            except Exception as exc:  # noqa: BLE001
                result = self._failure(Category.REMOVE, record, exc)
            report.results.append(result)
        return report

    # Steps -----------------------------------------------------------------

    def _apply_update(
        self,
        target: IdentityRecord,
        changes: Sequence[ChangeRecord],
        mutator: DirectoryMutator,
        lifecycle: LifecycleEngine,
    ) -> MutationResult:
        identity = target.path
        projected = apply_changes(target, changes)
        replacements: dict[str, str] = {}
        cleared: list[str] = []
        mutations: set[AttributeMutation] = set()
        for change in changes:
            mutation = binding_for(change.attribute).mutation
            if mutation is not AttributeMutation.VALUE:
                mutations.add(mutation)
            elif change.new_value:
                replacements[change.attribute] = change.new_value
            else:
                cleared.append(change.attribute)
        quarantine = AttributeMutation.QUARANTINE in mutations
        disable = AttributeMutation.DISABLE in mutations and not projected.enabled

        if replacements:
            mutator.replace_attributes(identity, replacements)
        if cleared:
            mutator.clear_attributes(identity, cleared)
        # Moving changes the identity handle, so it must come last.
        if quarantine:
            lifecycle.quarantine(target)
        elif disable:
            mutator.disable(identity)

        detail = ", ".join(change.attribute for change in changes)
        if quarantine:
            detail += f"; moved to {projected.path}"
        return MutationResult(
            category=Category.UPDATE,
            account_name=target.account_name,
            identifier=target.identifier,
            success=True,
            outcome=Outcome.UPDATED,
            detail=detail,
        )

    def _gate(
        self,
        report: CategoryReport,
        gate: SafetyGate,
        candidates: Sequence[IdentityRecord],
    ) -> bool:
        decision = gate.evaluate(report.category, [record.account_name for record in candidates])
        report.decision = decision
        if decision.allowed:
            return True

        reason = f"safety gate: {decision.count} candidates >= threshold {decision.threshold}"
        report.results.extend(
            MutationResult(
                category=report.category,
                account_name=record.account_name,
                identifier=record.identifier,
                success=False,
                outcome=Outcome.ABORTED,
                detail=reason,
            )
            for record in candidates
        )
        self._notify(
            f"Safety gate aborted category {report.category}",
            decision.abort_report(),
        )
        return False

    @staticmethod
    def _failure(category: Category, record: IdentityRecord, exc: Exception) -> MutationResult:
        log.error("Failed to process %s in %s: %s", record.account_name, category, exc)
        return MutationResult.failed(
            category, record.account_name, exc, identifier=record.identifier
        )

    def _finish_category(self, report: SyncReport, category_report: CategoryReport) -> None:
        report.categories[category_report.category] = category_report

        failures = category_report.failures
        if failures:
            lines = [f"There were errors in category {category_report.category}:"]
            lines.extend(f"  - {result.account_name}: {result.detail}" for result in failures)
            self._notify(
                f"Errors in category {category_report.category} ({len(failures)} failed)",
                "\n".join(lines),
            )

        if self.audit is not None:
            try:
                self.audit.record(
                    report.run_id,
                    category_report.category,
                    category_report.changes,
                    category_report.results,
                )
            except Exception as exc:
                log.exception("Audit export failed for %s", category_report.category)
                self._notify(
                    f"Audit export failed for category {category_report.category}",
                    f"{type(exc).__name__}: {exc}",
                )

    def _notify(self, subject: str, body: str) -> None:
        prefix = "[dry-run] " if self.dry_run else ""
        try:
            self.notifier.send(prefix + subject, body)
        except Exception:
            log.exception("Notification failed: %s", subject)
