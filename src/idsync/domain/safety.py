"""Pre-flight circuit breaker evaluated once per mutation category."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from idsync.config.sync import Thresholds
    from idsync.domain.model import Category

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class GateDecision:
    category: Category
    count: int
    threshold: int
    candidates: tuple[str, ...]

    @property
    def allowed(self) -> bool:
        return self.count < self.threshold

    def abort_report(self) -> str:
        lines = [
            f"Safety gate aborted category '{self.category}': "
            f"{self.count} candidates reached the threshold of {self.threshold}.",
            "No change in this category was applied. Candidates:",
        ]
        lines.extend(f"  - {name}" for name in self.candidates)
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SafetyGate:
    """Abort a whole category when its candidate count reaches the threshold.

    Categories are independent: a tripped category never blocks another one.
    """

    thresholds: Thresholds

    def evaluate(self, category: Category, candidates: Sequence[str]) -> GateDecision:
        decision = GateDecision(
            category=category,
            count=len(candidates),
            threshold=self.thresholds.for_category(category),
            candidates=tuple(candidates),
        )
        if decision.allowed:
            log.info(
                "Safety gate passed for %s: %s candidates (threshold %s)",
                category,
                decision.count,
                decision.threshold,
            )
        else:
            log.warning(
                "Safety gate tripped for %s: %s candidates (threshold %s)",
                category,
                decision.count,
                decision.threshold,
            )
        return decision
