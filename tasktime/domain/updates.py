from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Any

from .enums import TaskPriority, TaskStatus


class _Unset:
    """Marker for a field the caller did not supply."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskUpdate:
    """Partial task update.

    Every field defaults to ``UNSET``; ``None`` means "clear this field",
    which is only legal for the optional columns.
    """

    title: str | None = UNSET
    description: str | None = UNSET
    status: TaskStatus | str | None = UNSET
    priority: TaskPriority | str | None = UNSET
    estimate_hours: float | None = UNSET
    due_date: date | None = UNSET

    def supplied(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }
