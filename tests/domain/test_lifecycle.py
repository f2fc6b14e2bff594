from __future__ import annotations

from datetime import UTC, datetime

import pytest

from idsync.domain.lifecycle import INFO_ATTRIBUTE, LifecycleEngine
from idsync.domain.model import Category, LifecycleState, Outcome
from tests.helpers.directory import LEAVERS, STAFF, InMemoryDirectory, make_identity

NOW = datetime(2026, 3, 1, 8, 30, tzinfo=UTC)


def _engine(directory: InMemoryDirectory, sleeps: list[float]) -> LifecycleEngine:
    return LifecycleEngine(
        mutator=directory,
        reader=directory,
        leavers_container=LEAVERS,
        settle_seconds=1.5,
        sleep=sleeps.append,
        now_provider=lambda: NOW,
    )


def test_next_state_depends_on_container() -> None:
    engine = _engine(InMemoryDirectory(), [])

    assert engine.next_state(make_identity("1", container=STAFF)) is LifecycleState.QUARANTINED
    assert engine.next_state(make_identity("1", container=LEAVERS)) is LifecycleState.DELETED


def test_quarantine_runs_steps_in_order() -> None:
    record = make_identity("9", "gone")
    directory = InMemoryDirectory.with_records([record])
    directory.groups[record.path] = ["CN=VPN", "CN=Staff"]
    sleeps: list[float] = []

    result = _engine(directory, sleeps).process(record)

    assert directory.operations() == [
        "disable",
        "remove_group_membership",
        "replace_attributes",
        "move",
    ]
    assert directory.calls[1].argument == ["CN=VPN", "CN=Staff"]
    assert directory.calls[3].argument == LEAVERS
    assert sleeps == [1.5]
    assert result.outcome is Outcome.QUARANTINED
    assert result.category is Category.REMOVE
    moved = directory.records[f"CN=gone,{LEAVERS}"]
    assert moved.enabled is False


def test_quarantine_without_groups_skips_membership_removal() -> None:
    record = make_identity("9")
    directory = InMemoryDirectory.with_records([record])

    _engine(directory, []).quarantine(record)

    assert "remove_group_membership" not in directory.operations()


def test_note_is_appended_to_existing_info() -> None:
    record = make_identity("9", extensions={INFO_ATTRIBUTE: "hired 2020"})
    directory = InMemoryDirectory.with_records([record])

    _engine(directory, []).quarantine(record)

    note = directory.calls[1].argument
    assert note == {
        INFO_ATTRIBUTE: (
            "hired 2020\n2026-03-01 08:30:00Z idsync: quarantined, removed from 0 groups"
        )
    }


def test_delete_only_happens_on_second_run() -> None:
    record = make_identity("9", "gone")
    directory = InMemoryDirectory.with_records([record])
    sleeps: list[float] = []
    engine = _engine(directory, sleeps)

    first = engine.process(record)
    assert first.outcome is Outcome.QUARANTINED
    assert "delete" not in directory.operations()

    (quarantined,) = directory.fetch_identities()
    second = engine.process(quarantined)

    assert second.outcome is Outcome.DELETED
    assert directory.operations()[-2:] == ["replace_attributes", "delete"]
    assert directory.records == {}
    assert sleeps == [1.5, 1.5]


def test_failed_step_propagates_and_stops_the_sequence() -> None:
    record = make_identity("9", "gone")
    directory = InMemoryDirectory.with_records([record])
    directory.failing["gone"] = RuntimeError("access denied")

    with pytest.raises(RuntimeError, match="access denied"):
        _engine(directory, []).process(record)

    assert directory.operations() == ["disable"]
