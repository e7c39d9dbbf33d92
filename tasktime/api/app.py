from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI

from tasktime.config import Settings, load_settings
from tasktime.infra.db import check_db, create_db_engine, create_session_factory, init_db
from tasktime.infra.repository import TaskRepository
from tasktime.infra.security import IdentityGate
from tasktime.infra.users import UserRepository
from tasktime.services.analytics_service import AnalyticsService
from tasktime.services.task_service import TaskService
from tasktime.services.time_log_service import TimeLogService
from tasktime.services.user_service import UserService

from .deps import Services, get_services
from .errors import register_error_handlers
from .routes import analytics, tasks, users

logger = logging.getLogger(__name__)


def build_services(settings: Settings) -> Services:
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)

    user_repo = UserRepository(session_factory)
    task_repo = TaskRepository(session_factory)
    gate = IdentityGate(user_repo, settings.jwt_secret, settings.jwt_expires_minutes)
    return Services(
        engine=engine,
        gate=gate,
        users=UserService(user_repo, gate),
        tasks=TaskService(task_repo),
        time_log=TimeLogService(task_repo),
        analytics=AnalyticsService(task_repo),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Task time API ready")
        yield
        services.engine.dispose()
        logger.info("Database engine disposed")

    app = FastAPI(title="Task Time API", version="0.1.0", lifespan=lifespan)
    app.state.services = services
    register_error_handlers(app)

    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(analytics.router)

    @app.get("/health")
    def health(services: Services = Depends(get_services)):
        check_db(services.engine)
        return {"success": True, "database": "ok"}

    return app
