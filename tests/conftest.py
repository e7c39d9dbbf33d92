from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

import pytest

from tasktime.config import Settings
from tasktime.domain.entities import TaskEntity, TimeEntryEntity
from tasktime.domain.enums import TaskPriority, TaskStatus
from tasktime.infra.models import utcnow


class FakeTaskRepo:
    """In-memory stand-in for TaskRepository with the same owner scoping."""

    def __init__(self) -> None:
        self.tasks: dict[int, TaskEntity] = {}
        self._id = 1

    def list_tasks(self, owner_id: int) -> list[TaskEntity]:
        owned = [t for t in self.tasks.values() if t.owner_id == owner_id]
        return sorted(owned, key=lambda t: (t.created_at, t.id), reverse=True)

    def get_task(self, owner_id: int, task_id: int) -> TaskEntity | None:
        task = self.tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        return task

    def create_task(
        self,
        owner_id: int,
        data: dict,
        time_log: Iterable[TimeEntryEntity] = (),
    ) -> TaskEntity:
        now = utcnow()
        task = TaskEntity(
            id=self._id,
            owner_id=owner_id,
            title=data["title"],
            description=data.get("description"),
            status=TaskStatus(data["status"]),
            priority=TaskPriority(data["priority"]),
            estimate_hours=data.get("estimate_hours"),
            logged_hours=data.get("logged_hours", 0.0),
            due_date=data.get("due_date"),
            created_at=now,
            updated_at=now,
            time_log=tuple(time_log),
        )
        self.tasks[task.id] = task
        self._id += 1
        return task

    def update_task(self, owner_id: int, task_id: int, data: dict) -> TaskEntity | None:
        task = self.get_task(owner_id, task_id)
        if not task:
            return None
        changes = dict(data)
        if "status" in changes:
            changes["status"] = TaskStatus(changes["status"])
        if "priority" in changes:
            changes["priority"] = TaskPriority(changes["priority"])
        updated = replace(task, updated_at=utcnow(), **changes)
        self.tasks[task_id] = updated
        return updated

    def save_time_log(
        self,
        owner_id: int,
        task_id: int,
        mutate: Callable[[TaskEntity], TaskEntity],
    ) -> TaskEntity | None:
        task = self.get_task(owner_id, task_id)
        if not task:
            return None
        updated = mutate(task)
        self.tasks[task_id] = updated
        return updated

    def delete_task(self, owner_id: int, task_id: int) -> bool:
        if not self.get_task(owner_id, task_id):
            return False
        del self.tasks[task_id]
        return True


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def repo() -> FakeTaskRepo:
    return FakeTaskRepo()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 2, 9, 30))


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'tasktime.db'}",
        jwt_secret="test-secret-for-signing-tokens-0123456789",
        log_dir=str(tmp_path / "logs"),
    )
