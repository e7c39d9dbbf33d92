from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from tasktime.domain.entities import TaskEntity, TimeEntryEntity
from tasktime.domain.enums import TaskPriority, TaskStatus
from tasktime.domain.errors import ConflictError

from .models import TaskModel, TimeEntryModel, utcnow

logger = logging.getLogger(__name__)

CONCURRENT_UPDATE_MESSAGE = "Task was modified concurrently, retry."


def _entry_to_entity(model: TimeEntryModel) -> TimeEntryEntity:
    return TimeEntryEntity(
        entry_id=model.entry_id,
        duration_hours=model.duration_hours,
        logged_at=model.logged_at,
        note=model.note,
    )


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        owner_id=model.owner_id,
        title=model.title,
        description=model.description,
        status=TaskStatus(model.status),
        priority=TaskPriority(model.priority),
        estimate_hours=model.estimate_hours,
        logged_hours=model.logged_hours,
        due_date=model.due_date,
        created_at=model.created_at,
        updated_at=model.updated_at,
        time_log=tuple(_entry_to_entity(entry) for entry in model.time_entries),
    )


def _entry_model(entry: TimeEntryEntity) -> TimeEntryModel:
    return TimeEntryModel(
        entry_id=entry.entry_id,
        duration_hours=entry.duration_hours,
        logged_at=entry.logged_at,
        note=entry.note,
    )


class TaskRepository:
    """Owner-scoped persistence for tasks and their time entries.

    Lookups filter on both the task id and the owner id, so a task owned by
    someone else is reported exactly like a missing one (``None``).
    Mutations lock the task row and rely on the ``version`` column to detect
    a concurrent writer.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list_tasks(self, owner_id: int) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = (
                select(TaskModel)
                .where(TaskModel.owner_id == owner_id)
                .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, owner_id: int, task_id: int) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = self._find(session, owner_id, task_id)
            return _to_entity(task) if task else None

    def create_task(
        self,
        owner_id: int,
        data: dict,
        time_log: Iterable[TimeEntryEntity] = (),
    ) -> TaskEntity:
        with self._session_factory() as session:
            task = TaskModel(owner_id=owner_id, **data)
            task.time_entries = [_entry_model(entry) for entry in time_log]
            session.add(task)
            session.commit()
            session.refresh(task)
            logger.info("Task created id=%s owner=%s", task.id, owner_id)
            return _to_entity(task)

    def update_task(self, owner_id: int, task_id: int, data: dict) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = self._find(session, owner_id, task_id, lock=True)
            if not task:
                return None

            for key, value in data.items():
                setattr(task, key, value)
            task.updated_at = utcnow()
            self._commit(session, task_id)
            session.refresh(task)
            return _to_entity(task)

    def save_time_log(
        self,
        owner_id: int,
        task_id: int,
        mutate: Callable[[TaskEntity], TaskEntity],
    ) -> Optional[TaskEntity]:
        """Apply ``mutate`` to the locked task and persist its time log.

        ``mutate`` receives the current task and returns the task as it should
        be stored; entries are matched on ``entry_id``. Exceptions raised by
        ``mutate`` abort the transaction without writing anything.
        """
        with self._session_factory() as session:
            task = self._find(session, owner_id, task_id, lock=True)
            if not task:
                return None

            updated = mutate(_to_entity(task))
            existing = {entry.entry_id: entry for entry in task.time_entries}
            for entry in updated.time_log:
                model = existing.get(entry.entry_id)
                if model is None:
                    task.time_entries.append(_entry_model(entry))
                    continue
                model.duration_hours = entry.duration_hours
                model.note = entry.note
                model.logged_at = entry.logged_at

            task.logged_hours = updated.logged_hours
            task.updated_at = updated.updated_at
            self._commit(session, task_id)
            session.refresh(task)
            return _to_entity(task)

    def delete_task(self, owner_id: int, task_id: int) -> bool:
        with self._session_factory() as session:
            task = self._find(session, owner_id, task_id, lock=True)
            if not task:
                return False
            session.delete(task)
            self._commit(session, task_id)
            logger.info("Task deleted id=%s owner=%s", task_id, owner_id)
            return True

    @staticmethod
    def _find(session: Session, owner_id: int, task_id: int, lock: bool = False) -> TaskModel | None:
        stmt = select(TaskModel).where(TaskModel.id == task_id, TaskModel.owner_id == owner_id)
        if lock:
            stmt = stmt.with_for_update()
        return session.scalars(stmt).one_or_none()

    @staticmethod
    def _commit(session: Session, task_id: int) -> None:
        try:
            session.commit()
        except StaleDataError as exc:
            session.rollback()
            logger.warning("Concurrent update rejected for task id=%s", task_id)
            raise ConflictError(CONCURRENT_UPDATE_MESSAGE) from exc
