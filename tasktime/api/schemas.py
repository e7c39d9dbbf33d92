"""
Request bodies and response serializers for the HTTP API.

Bodies only coerce JSON types; the services own the business validation so
that the same rules apply to non-HTTP callers. Field names follow the public
wire format (``estimate_time``, ``logged_time``, ``duration``).
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, EmailStr, StrictFloat, StrictInt

from tasktime.domain.entities import (
    AnalyticsReport,
    TaskEntity,
    TimeEntryEntity,
    TimeSummary,
    UserEntity,
)
from tasktime.domain.errors import ValidationError
from tasktime.domain.updates import UNSET, TaskUpdate

# Wire name -> service field name.
TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "estimate_time": "estimate_hours",
    "due_date": "due_date",
}

# Strict so JSON booleans are not read as 1.0/0.0.
Hours = Union[StrictInt, StrictFloat]


class SignupBody(BaseModel):
    name: str
    email: EmailStr
    password: str


class LoginBody(BaseModel):
    email: str
    password: str


class ProfileBody(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None


class TaskCreateBody(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    estimate_time: Optional[Hours] = None
    logged_time: Optional[Hours] = None
    due_date: Optional[date] = None

    def to_data(self) -> dict[str, Any]:
        data = {service: getattr(self, wire) for wire, service in TASK_FIELDS.items()}
        data["logged_hours"] = self.logged_time
        return data


class TaskUpdateBody(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    estimate_time: Optional[Hours] = None
    logged_time: Optional[Hours] = None
    due_date: Optional[date] = None

    def to_update(self) -> TaskUpdate:
        if "logged_time" in self.model_fields_set:
            raise ValidationError("logged_time is derived from the time log; use the time-log endpoints.")
        return TaskUpdate(
            **{
                service: getattr(self, wire)
                for wire, service in TASK_FIELDS.items()
                if wire in self.model_fields_set
            }
        )


class TimeLogBody(BaseModel):
    duration: Optional[Hours] = None
    note: Optional[str] = None

    def note_or_unset(self) -> Any:
        return self.note if "note" in self.model_fields_set else UNSET


def _iso(value: datetime | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def entry_to_dict(entry: TimeEntryEntity) -> dict[str, Any]:
    return {
        "entry_id": entry.entry_id,
        "duration": entry.duration_hours,
        "logged_at": _iso(entry.logged_at),
        "note": entry.note,
    }


def task_to_dict(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "owner_id": task.owner_id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "estimate_time": task.estimate_hours,
        "logged_time": task.logged_hours,
        "due_date": _iso(task.due_date),
        "created_at": _iso(task.created_at),
        "updated_at": _iso(task.updated_at),
        "time_log": [entry_to_dict(entry) for entry in task.time_log],
    }


def summary_to_dict(summary: TimeSummary) -> dict[str, Any]:
    return {
        "totalLoggedTime": summary.total_logged_hours,
        "timeLogHistory": [entry_to_dict(entry) for entry in summary.time_log_history],
    }


def report_to_dict(report: AnalyticsReport) -> dict[str, Any]:
    return {
        "totalTasks": report.total_tasks,
        "completedTasks": report.completed_tasks,
        "totalEstimatedHours": report.total_estimated_hours,
        "totalLoggedHours": report.total_logged_hours,
        "estimationAccuracy": report.estimation_accuracy,
        "dailyProgress": [
            {"date": bucket.date, "durationHours": bucket.duration_hours}
            for bucket in report.daily_progress
        ],
        "weeklyProgress": [
            {"week": bucket.week, "durationHours": bucket.duration_hours}
            for bucket in report.weekly_progress
        ],
    }


def user_to_dict(user: UserEntity) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": _iso(user.created_at),
    }


def envelope(message: str | None = None, **data: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(data)
    return body
