from __future__ import annotations

import math

import pytest

from tasktime.domain.enums import TaskStatus
from tasktime.domain.errors import NotFoundError, ValidationError
from tasktime.domain.updates import TaskUpdate
from tasktime.services.task_service import TaskService
from tasktime.services.time_log_service import TimeLogService

OWNER = 1
OTHER = 2


def _setup(repo, clock):
    tasks = TaskService(repo)
    time_log = TimeLogService(repo, clock=clock)
    task = tasks.create_task(OWNER, {"title": "Draft proposal"})
    return tasks, time_log, task


def _assert_invariant(task) -> None:
    assert task.logged_hours == math.fsum(e.duration_hours for e in task.time_log)


def test_log_time_appends_sequential_entries(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)

    time_log.log_time(OWNER, task.id, 1.5, "draft")
    updated = time_log.log_time(OWNER, task.id, 0.5)

    assert [e.entry_id for e in updated.time_log] == [1, 2]
    assert updated.logged_hours == 2.0
    assert updated.time_log[0].note == "draft"
    assert updated.time_log[1].note is None
    assert updated.time_log[1].logged_at == clock.now
    _assert_invariant(updated)


def test_update_time_entry_resums_all_entries(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1.5, "draft")
    time_log.log_time(OWNER, task.id, 0.5)

    updated = time_log.update_time_entry(OWNER, task.id, 1, 2.0)

    assert updated.logged_hours == 2.5
    assert updated.time_log[0].duration_hours == 2.0
    assert updated.time_log[0].note == "draft"
    _assert_invariant(updated)


def test_update_time_entry_note_can_be_replaced_or_cleared(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1, "first pass")

    replaced = time_log.update_time_entry(OWNER, task.id, 1, 1, "second pass")
    assert replaced.time_log[0].note == "second pass"

    cleared = time_log.update_time_entry(OWNER, task.id, 1, 1, None)
    assert cleared.time_log[0].note is None


def test_entry_ids_increase_strictly_and_survive_edits(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)

    ids = []
    for hours in (1, 2, 3):
        ids.append(time_log.log_time(OWNER, task.id, hours).time_log[-1].entry_id)
    time_log.update_time_entry(OWNER, task.id, 2, 0.25)
    ids.append(time_log.log_time(OWNER, task.id, 1).time_log[-1].entry_id)

    assert ids == [1, 2, 3, 4]


@pytest.mark.parametrize("duration", [0, -1, -0.0001, None, "1", True, float("nan"), float("inf")])
def test_log_time_rejects_non_positive_duration(repo, clock, duration) -> None:
    _, time_log, task = _setup(repo, clock)

    with pytest.raises(ValidationError):
        time_log.log_time(OWNER, task.id, duration)

    assert repo.tasks[task.id].time_log == ()


def test_log_time_accepts_tiny_duration(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)

    updated = time_log.log_time(OWNER, task.id, 0.0001)

    assert updated.logged_hours == pytest.approx(0.0001)


def test_validation_happens_before_lookup(repo, clock) -> None:
    _, time_log, _ = _setup(repo, clock)

    with pytest.raises(ValidationError):
        time_log.log_time(OWNER, 999, 0)


def test_update_time_entry_rejects_bad_duration(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1)

    with pytest.raises(ValidationError):
        time_log.update_time_entry(OWNER, task.id, 1, 0)

    assert repo.tasks[task.id].logged_hours == 1.0


def test_update_missing_entry_is_not_found(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1)

    with pytest.raises(NotFoundError, match="Time entry not found"):
        time_log.update_time_entry(OWNER, task.id, 7, 2)

    assert repo.tasks[task.id].logged_hours == 1.0


def test_time_log_is_owner_scoped(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1)

    with pytest.raises(NotFoundError):
        time_log.log_time(OTHER, task.id, 1)
    with pytest.raises(NotFoundError):
        time_log.update_time_entry(OTHER, task.id, 1, 5)
    with pytest.raises(NotFoundError):
        time_log.get_time_summary(OTHER, task.id)

    assert repo.tasks[task.id].logged_hours == 1.0


def test_time_summary_is_stable_between_reads(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)
    time_log.log_time(OWNER, task.id, 1.25, "review")

    first = time_log.get_time_summary(OWNER, task.id)
    second = time_log.get_time_summary(OWNER, task.id)

    assert first == second
    assert first.total_logged_hours == 1.25
    assert [e.note for e in first.time_log_history] == ["review"]


def test_done_task_still_accepts_time(repo, clock) -> None:
    tasks, time_log, task = _setup(repo, clock)
    tasks.update_task(OWNER, task.id, TaskUpdate(status=TaskStatus.DONE))

    updated = time_log.log_time(OWNER, task.id, 0.5)

    assert updated.status == TaskStatus.DONE
    assert updated.logged_hours == 0.5


def test_invariant_holds_after_mixed_operations(repo, clock) -> None:
    _, time_log, task = _setup(repo, clock)

    for hours in (0.1, 0.2, 0.3, 1.7):
        _assert_invariant(time_log.log_time(OWNER, task.id, hours))
    _assert_invariant(time_log.update_time_entry(OWNER, task.id, 3, 0.05))
    _assert_invariant(time_log.update_time_entry(OWNER, task.id, 1, 4))
