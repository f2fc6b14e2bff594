from __future__ import annotations

import logging

import pytest

from idsync.config import ConfigurationError, Thresholds
from idsync.domain.model import Category
from idsync.domain.safety import SafetyGate


@pytest.fixture
def gate() -> SafetyGate:
    return SafetyGate(Thresholds(add=3, update=5, remove=2))


def test_count_below_threshold_passes(gate: SafetyGate) -> None:
    decision = gate.evaluate(Category.REMOVE, ["a"])

    assert decision.allowed
    assert decision.threshold == 2


def test_count_equal_to_threshold_aborts(
    gate: SafetyGate, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="idsync.domain.safety"):
        decision = gate.evaluate(Category.REMOVE, ["a", "b"])

    assert not decision.allowed
    assert "Safety gate tripped for remove" in caplog.text


def test_each_category_uses_its_own_threshold(gate: SafetyGate) -> None:
    candidates = ["a", "b", "c", "d"]

    assert not gate.evaluate(Category.ADD, candidates).allowed
    assert gate.evaluate(Category.UPDATE, candidates).allowed


def test_abort_report_lists_every_candidate(gate: SafetyGate) -> None:
    decision = gate.evaluate(Category.ADD, ["jdoe", "asmith", "bjones"])

    report = decision.abort_report()

    assert "'add'" in report
    assert "threshold of 3" in report
    for name in ("jdoe", "asmith", "bjones"):
        assert f"  - {name}" in report


def test_thresholds_must_be_positive() -> None:
    with pytest.raises(ConfigurationError, match="add"):
        Thresholds(add=0, update=1, remove=1)
