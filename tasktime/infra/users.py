from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from tasktime.domain.entities import UserEntity
from tasktime.domain.errors import ConflictError

from .models import UserModel

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email is already registered."


def _to_entity(model: UserModel) -> UserEntity:
    return UserEntity(
        id=model.id,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        created_at=model.created_at,
    )


class UserRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            return _to_entity(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.scalars(select(UserModel).where(UserModel.email == email)).one_or_none()
            return _to_entity(user) if user else None

    def create_user(self, name: str, email: str, password_hash: str) -> UserEntity:
        with self._session_factory() as session:
            user = UserModel(name=name, email=email, password_hash=password_hash)
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError(EMAIL_TAKEN_MESSAGE) from exc
            session.refresh(user)
            logger.info("User created id=%s", user.id)
            return _to_entity(user)

    def update_user(self, user_id: int, data: dict) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            if not user:
                return None
            for key, value in data.items():
                setattr(user, key, value)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("Email is already in use by another user.") from exc
            session.refresh(user)
            return _to_entity(user)

    def delete_user(self, user_id: int) -> bool:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            if not user:
                return False
            session.delete(user)
            session.commit()
            logger.info("User deleted id=%s", user_id)
            return True
