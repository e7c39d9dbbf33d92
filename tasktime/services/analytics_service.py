from __future__ import annotations

import math
from collections import defaultdict

from tasktime.domain.entities import AnalyticsReport, DailyProgress, WeeklyProgress
from tasktime.domain.enums import TaskStatus
from tasktime.domain.weeks import day_key, iso_week_key
from tasktime.infra.repository import TaskRepository


def estimation_accuracy(estimated: float, logged: float) -> float | None:
    """Percentage of the estimate left unused; negative when over budget."""
    if estimated <= 0:
        return None
    return ((estimated - logged) / estimated) * 100


class AnalyticsService:
    def __init__(self, repo: TaskRepository) -> None:
        self._repo = repo

    def compute_analytics(self, owner_id: int) -> AnalyticsReport:
        tasks = self._repo.list_tasks(owner_id)
        if not tasks:
            return AnalyticsReport()

        estimated: list[float] = []
        logged: list[float] = []
        completed = 0
        daily: dict[str, list[float]] = defaultdict(list)
        weekly: dict[str, list[float]] = defaultdict(list)

        for task in tasks:
            if task.estimate_hours:
                estimated.append(task.estimate_hours)
            if task.logged_hours:
                logged.append(task.logged_hours)
            if task.status == TaskStatus.DONE:
                completed += 1
            for entry in task.time_log:
                daily[day_key(entry.logged_at)].append(entry.duration_hours)
                weekly[iso_week_key(entry.logged_at)].append(entry.duration_hours)

        total_estimated = math.fsum(estimated)
        total_logged = math.fsum(logged)
        return AnalyticsReport(
            total_tasks=len(tasks),
            completed_tasks=completed,
            total_estimated_hours=total_estimated,
            total_logged_hours=total_logged,
            estimation_accuracy=estimation_accuracy(total_estimated, total_logged),
            daily_progress=tuple(
                DailyProgress(date=key, duration_hours=math.fsum(hours))
                for key, hours in sorted(daily.items())
            ),
            weekly_progress=tuple(
                WeeklyProgress(week=key, duration_hours=math.fsum(hours))
                for key, hours in sorted(weekly.items())
            ),
        )
