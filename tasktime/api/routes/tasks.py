from __future__ import annotations

from fastapi import APIRouter, Depends

from tasktime.api.deps import Services, get_current_user, get_services
from tasktime.api.schemas import (
    TaskCreateBody,
    TaskUpdateBody,
    TimeLogBody,
    envelope,
    summary_to_dict,
    task_to_dict,
)
from tasktime.domain.entities import UserEntity

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=201)
def create_task(
    body: TaskCreateBody,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    task = services.tasks.create_task(user.id, body.to_data())
    return envelope("Task created successfully.", task=task_to_dict(task))


@router.get("")
def list_tasks(user: UserEntity = Depends(get_current_user), services: Services = Depends(get_services)):
    tasks = services.tasks.list_tasks(user.id)
    return envelope(tasks=[task_to_dict(task) for task in tasks])


@router.get("/{task_id}")
def get_task(
    task_id: int,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return envelope(task=task_to_dict(services.tasks.get_task(user.id, task_id)))


@router.put("/{task_id}")
def update_task(
    task_id: int,
    body: TaskUpdateBody,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    task = services.tasks.update_task(user.id, task_id, body.to_update())
    return envelope("Task updated successfully.", task=task_to_dict(task))


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.tasks.delete_task(user.id, task_id)
    return envelope("Task deleted successfully.")


@router.post("/{task_id}/time-log")
def log_time(
    task_id: int,
    body: TimeLogBody,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    task = services.time_log.log_time(user.id, task_id, body.duration, body.note)
    return envelope("Time logged successfully.", task=task_to_dict(task))


@router.put("/{task_id}/time-log/{entry_id}")
def update_time_entry(
    task_id: int,
    entry_id: int,
    body: TimeLogBody,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    task = services.time_log.update_time_entry(
        user.id, task_id, entry_id, body.duration, body.note_or_unset()
    )
    return envelope("Time entry updated successfully.", task=task_to_dict(task))


@router.get("/{task_id}/time-summary")
def get_time_summary(
    task_id: int,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return envelope(**summary_to_dict(services.time_log.get_time_summary(user.id, task_id)))
