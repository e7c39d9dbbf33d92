from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class TimeEntryEntity:
    entry_id: int
    duration_hours: float
    logged_at: datetime
    note: str | None = None


@dataclass(frozen=True)
class TaskEntity:
    id: int | None
    owner_id: int
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    estimate_hours: float | None
    logged_hours: float
    due_date: Optional[date]
    created_at: datetime
    updated_at: datetime
    time_log: tuple[TimeEntryEntity, ...] = ()


@dataclass(frozen=True)
class UserEntity:
    id: int | None
    name: str
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime | None = None


@dataclass(frozen=True)
class TimeSummary:
    total_logged_hours: float
    time_log_history: tuple[TimeEntryEntity, ...]


@dataclass(frozen=True)
class DailyProgress:
    date: str
    duration_hours: float


@dataclass(frozen=True)
class WeeklyProgress:
    week: str
    duration_hours: float


@dataclass(frozen=True)
class AnalyticsReport:
    total_tasks: int = 0
    completed_tasks: int = 0
    total_estimated_hours: float = 0
    total_logged_hours: float = 0
    estimation_accuracy: float | None = None
    daily_progress: tuple[DailyProgress, ...] = ()
    weekly_progress: tuple[WeeklyProgress, ...] = ()
