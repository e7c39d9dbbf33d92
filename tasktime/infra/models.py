from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tasktime.domain.enums import TaskPriority, TaskStatus

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tasks = relationship("TaskModel", cascade="all, delete")


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.TODO.value, index=True)
    priority = Column(String(10), nullable=False, default=TaskPriority.MEDIUM.value)
    estimate_hours = Column(Float, nullable=True)
    logged_hours = Column(Float, nullable=False, default=0.0)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    version = Column(Integer, nullable=False)

    time_entries = relationship(
        "TimeEntryModel",
        order_by="TimeEntryModel.entry_id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}


class TimeEntryModel(Base):
    __tablename__ = "time_entries"
    __table_args__ = (UniqueConstraint("task_id", "entry_id", name="uq_time_entries_task_entry"),)

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_id = Column(Integer, nullable=False)
    duration_hours = Column(Float, nullable=False)
    logged_at = Column(DateTime, nullable=False, default=utcnow)
    note = Column(Text, nullable=True)
