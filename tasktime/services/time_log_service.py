from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable

from tasktime.domain.entities import TaskEntity, TimeEntryEntity, TimeSummary
from tasktime.domain.errors import NotFoundError, ValidationError
from tasktime.domain.updates import UNSET
from tasktime.infra.models import utcnow
from tasktime.infra.repository import TaskRepository

from .task_service import TASK_NOT_FOUND, is_number

logger = logging.getLogger(__name__)

ENTRY_NOT_FOUND = "Time entry not found."


def total_hours(entries: Iterable[TimeEntryEntity]) -> float:
    return math.fsum(entry.duration_hours for entry in entries)


def next_entry_id(entries: tuple[TimeEntryEntity, ...]) -> int:
    # Entries are never removed, so the count is also the highest id.
    return len(entries) + 1


def _parse_duration(value: Any) -> float:
    if not is_number(value) or value <= 0:
        raise ValidationError("Duration must be a positive number of hours.")
    return float(value)


def _parse_note(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Note must be text.")
    return value.strip() or None


class TimeLogService:
    """Appends and edits the time entries of a single task.

    ``logged_hours`` is always rewritten as the sum of the task's entries in
    the same transaction that changes them.
    """

    def __init__(self, repo: TaskRepository, clock: Callable[[], datetime] = utcnow) -> None:
        self._repo = repo
        self._clock = clock

    def log_time(self, owner_id: int, task_id: int, duration_hours: Any, note: Any = None) -> TaskEntity:
        duration = _parse_duration(duration_hours)
        note = _parse_note(note)

        def append(task: TaskEntity) -> TaskEntity:
            now = self._clock()
            entry = TimeEntryEntity(
                entry_id=next_entry_id(task.time_log),
                duration_hours=duration,
                logged_at=now,
                note=note,
            )
            time_log = task.time_log + (entry,)
            return replace(task, time_log=time_log, logged_hours=total_hours(time_log), updated_at=now)

        task = self._repo.save_time_log(owner_id, task_id, append)
        if not task:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info(
            "Time logged task=%s owner=%s entry=%s hours=%s total=%s",
            task_id,
            owner_id,
            task.time_log[-1].entry_id,
            duration,
            task.logged_hours,
        )
        return task

    def update_time_entry(
        self,
        owner_id: int,
        task_id: int,
        entry_id: int,
        duration_hours: Any,
        note: Any = UNSET,
    ) -> TaskEntity:
        duration = _parse_duration(duration_hours)
        if note is not UNSET:
            note = _parse_note(note)

        def edit(task: TaskEntity) -> TaskEntity:
            if not any(entry.entry_id == entry_id for entry in task.time_log):
                raise NotFoundError(ENTRY_NOT_FOUND)
            time_log = tuple(
                replace(
                    entry,
                    duration_hours=duration,
                    note=entry.note if note is UNSET else note,
                )
                if entry.entry_id == entry_id
                else entry
                for entry in task.time_log
            )
            return replace(
                task,
                time_log=time_log,
                logged_hours=total_hours(time_log),
                updated_at=self._clock(),
            )

        task = self._repo.save_time_log(owner_id, task_id, edit)
        if not task:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info(
            "Time entry updated task=%s owner=%s entry=%s hours=%s total=%s",
            task_id,
            owner_id,
            entry_id,
            duration,
            task.logged_hours,
        )
        return task

    def get_time_summary(self, owner_id: int, task_id: int) -> TimeSummary:
        task = self._repo.get_task(owner_id, task_id)
        if not task:
            raise NotFoundError(TASK_NOT_FOUND)
        return TimeSummary(total_logged_hours=task.logged_hours, time_log_history=task.time_log)
