from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    TODO = "To-do"
    IN_PROGRESS = "In progress"
    DONE = "Done"


class TaskPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
