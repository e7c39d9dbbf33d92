from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest
from sqlalchemy import func, select

from tasktime.domain.entities import TimeEntryEntity
from tasktime.domain.errors import ConflictError
from tasktime.infra.db import create_db_engine, create_session_factory, init_db
from tasktime.infra.models import TimeEntryModel
from tasktime.infra.repository import TaskRepository
from tasktime.infra.users import UserRepository


@pytest.fixture()
def session_factory(settings):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def users(session_factory) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture()
def tasks(session_factory) -> TaskRepository:
    return TaskRepository(session_factory)


@pytest.fixture()
def owner(users):
    return users.create_user("Ada", "ada@example.com", "hash")


def _data(title: str) -> dict:
    return {"title": title, "status": "To-do", "priority": "Medium", "logged_hours": 0.0}


def _append(hours: float, at: datetime = datetime(2025, 1, 2, 9)):
    def mutate(task):
        entry = TimeEntryEntity(entry_id=len(task.time_log) + 1, duration_hours=hours, logged_at=at)
        time_log = task.time_log + (entry,)
        return replace(
            task,
            time_log=time_log,
            logged_hours=sum(e.duration_hours for e in time_log),
            updated_at=at,
        )
    return mutate


def _count_entries(session_factory) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(TimeEntryModel))


def test_create_and_fetch_task(tasks, owner) -> None:
    created = tasks.create_task(owner.id, _data("Draft proposal"))

    fetched = tasks.get_task(owner.id, created.id)

    assert fetched == created
    assert fetched.time_log == ()
    assert fetched.logged_hours == 0


def test_lookups_are_owner_scoped(tasks, users, owner) -> None:
    other = users.create_user("Bob", "bob@example.com", "hash")
    task = tasks.create_task(owner.id, _data("private"))

    assert tasks.get_task(other.id, task.id) is None
    assert tasks.update_task(other.id, task.id, {"title": "stolen"}) is None
    assert tasks.save_time_log(other.id, task.id, _append(1)) is None
    assert tasks.delete_task(other.id, task.id) is False
    assert tasks.list_tasks(other.id) == []
    assert tasks.get_task(owner.id, task.id).title == "private"


def test_list_tasks_newest_first(tasks, owner) -> None:
    first = tasks.create_task(owner.id, _data("first"))
    second = tasks.create_task(owner.id, _data("second"))

    assert [t.id for t in tasks.list_tasks(owner.id)] == [second.id, first.id]


def test_time_log_is_persisted_in_order(tasks, owner) -> None:
    task = tasks.create_task(owner.id, _data("logged"))

    tasks.save_time_log(owner.id, task.id, _append(1.5))
    tasks.save_time_log(owner.id, task.id, _append(0.5))
    stored = tasks.get_task(owner.id, task.id)

    assert [e.entry_id for e in stored.time_log] == [1, 2]
    assert stored.logged_hours == 2.0
    assert stored.time_log[0].logged_at == datetime(2025, 1, 2, 9)


def test_failed_mutation_writes_nothing(tasks, owner) -> None:
    task = tasks.create_task(owner.id, _data("logged"))
    tasks.save_time_log(owner.id, task.id, _append(1))

    def explode(current):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        tasks.save_time_log(owner.id, task.id, explode)

    assert tasks.get_task(owner.id, task.id).logged_hours == 1.0


def test_delete_task_cascades_to_entries(tasks, owner, session_factory) -> None:
    task = tasks.create_task(owner.id, _data("short lived"))
    tasks.save_time_log(owner.id, task.id, _append(1))

    assert tasks.delete_task(owner.id, task.id) is True
    assert tasks.get_task(owner.id, task.id) is None
    assert _count_entries(session_factory) == 0


def test_delete_user_cascades_to_tasks(tasks, users, owner, session_factory) -> None:
    task = tasks.create_task(owner.id, _data("orphan"))
    tasks.save_time_log(owner.id, task.id, _append(1))

    assert users.delete_user(owner.id) is True
    assert tasks.list_tasks(owner.id) == []
    assert _count_entries(session_factory) == 0


def test_duplicate_email_is_conflict(users, owner) -> None:
    with pytest.raises(ConflictError):
        users.create_user("Other Ada", "ada@example.com", "hash")


def test_concurrent_write_is_rejected(tasks, owner) -> None:
    task = tasks.create_task(owner.id, _data("contended"))
    tasks.save_time_log(owner.id, task.id, _append(1))

    def edit_while_someone_logs(current):
        # Another writer commits between our read and our write.
        tasks.save_time_log(owner.id, task.id, _append(2))
        entry = replace(current.time_log[0], duration_hours=5)
        return replace(current, time_log=(entry,), logged_hours=5)

    with pytest.raises(ConflictError):
        tasks.save_time_log(owner.id, task.id, edit_while_someone_logs)

    stored = tasks.get_task(owner.id, task.id)
    assert [e.duration_hours for e in stored.time_log] == [1, 2]
    assert stored.logged_hours == 3
