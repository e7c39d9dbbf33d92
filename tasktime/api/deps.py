from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine

from tasktime.domain.entities import UserEntity
from tasktime.infra.security import IdentityGate
from tasktime.services.analytics_service import AnalyticsService
from tasktime.services.task_service import TaskService
from tasktime.services.time_log_service import TimeLogService
from tasktime.services.user_service import UserService

auth_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Services:
    engine: Engine
    gate: IdentityGate
    users: UserService
    tasks: TaskService
    time_log: TimeLogService
    analytics: AnalyticsService


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    services: Services = Depends(get_services),
) -> UserEntity:
    token = credentials.credentials if credentials else None
    return services.gate.resolve(token)
