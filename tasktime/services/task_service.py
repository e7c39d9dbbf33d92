from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any

from tasktime.domain.entities import TaskEntity, TimeEntryEntity
from tasktime.domain.enums import TaskPriority, TaskStatus
from tasktime.domain.errors import NotFoundError, ValidationError
from tasktime.domain.updates import TaskUpdate
from tasktime.infra.models import utcnow
from tasktime.infra.repository import TaskRepository

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found."
INITIAL_ENTRY_NOTE = "Initial logged time"


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in TaskStatus)
        raise ValidationError(f"Status must be one of: {allowed}.") from None


def parse_priority(value: Any) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        allowed = ", ".join(priority.value for priority in TaskPriority)
        raise ValidationError(f"Priority must be one of: {allowed}.") from None


def parse_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Title is required.")
    return value.strip()


def parse_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Description must be text.")
    return value.strip() or None


def parse_hours(value: Any, field: str) -> float | None:
    if value is None:
        return None
    if not is_number(value) or value < 0:
        raise ValidationError(f"{field} must be a non-negative number of hours.")
    return float(value)


def parse_due_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("Due date must be an ISO date (YYYY-MM-DD).")


class TaskService:
    def __init__(self, repo: TaskRepository) -> None:
        self._repo = repo

    def list_tasks(self, owner_id: int) -> list[TaskEntity]:
        return self._repo.list_tasks(owner_id)

    def get_task(self, owner_id: int, task_id: int) -> TaskEntity:
        task = self._repo.get_task(owner_id, task_id)
        if not task:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    def create_task(self, owner_id: int, data: dict) -> TaskEntity:
        status = data.get("status")
        priority = data.get("priority")
        normalized = {
            "title": parse_title(data.get("title")),
            "description": parse_description(data.get("description")),
            "status": (parse_status(status) if status is not None else TaskStatus.TODO).value,
            "priority": (parse_priority(priority) if priority is not None else TaskPriority.MEDIUM).value,
            "estimate_hours": parse_hours(data.get("estimate_hours"), "Estimate"),
            "due_date": parse_due_date(data.get("due_date")),
        }

        # Logged time is derived from the time log, so an initial amount
        # becomes the first entry.
        initial = parse_hours(data.get("logged_hours"), "Logged time")
        time_log: tuple[TimeEntryEntity, ...] = ()
        if initial:
            time_log = (
                TimeEntryEntity(
                    entry_id=1,
                    duration_hours=initial,
                    logged_at=utcnow(),
                    note=INITIAL_ENTRY_NOTE,
                ),
            )
        normalized["logged_hours"] = initial or 0.0

        return self._repo.create_task(owner_id, normalized, time_log)

    def update_task(self, owner_id: int, task_id: int, update: TaskUpdate) -> TaskEntity:
        normalized = self._normalize_update(update)
        if not normalized:
            return self.get_task(owner_id, task_id)

        task = self._repo.update_task(owner_id, task_id, normalized)
        if not task:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info("Task updated id=%s owner=%s fields=%s", task_id, owner_id, sorted(normalized))
        return task

    def delete_task(self, owner_id: int, task_id: int) -> None:
        if not self._repo.delete_task(owner_id, task_id):
            raise NotFoundError(TASK_NOT_FOUND)

    @staticmethod
    def _normalize_update(update: TaskUpdate) -> dict:
        supplied = update.supplied()
        normalized: dict[str, Any] = {}
        if "title" in supplied:
            normalized["title"] = parse_title(supplied["title"])
        if "description" in supplied:
            normalized["description"] = parse_description(supplied["description"])
        if "status" in supplied:
            normalized["status"] = parse_status(supplied["status"]).value
        if "priority" in supplied:
            normalized["priority"] = parse_priority(supplied["priority"]).value
        if "estimate_hours" in supplied:
            normalized["estimate_hours"] = parse_hours(supplied["estimate_hours"], "Estimate")
        if "due_date" in supplied:
            normalized["due_date"] = parse_due_date(supplied["due_date"])
        return normalized
