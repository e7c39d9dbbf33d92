from __future__ import annotations

import logging
import re

from tasktime.domain.entities import UserEntity
from tasktime.domain.errors import ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from tasktime.infra.security import IdentityGate, hash_password, verify_password
from tasktime.infra.users import EMAIL_TAKEN_MESSAGE, UserRepository

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d]{8,}$")
USER_NOT_FOUND = "User not found."


def _clean_email(email: str) -> str:
    email = email.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format.")
    return email


class UserService:
    def __init__(self, users: UserRepository, gate: IdentityGate) -> None:
        self._users = users
        self._gate = gate

    def signup(self, name: str, email: str, password: str) -> UserEntity:
        if not name or not name.strip() or not email or not password:
            raise ValidationError("Missing required fields: email, password, name.")
        email = _clean_email(email)
        if not PASSWORD_RE.match(password):
            raise ValidationError(
                "Password must be at least 8 characters long and contain both letters and numbers."
            )
        if self._users.get_by_email(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        return self._users.create_user(name.strip(), email, hash_password(password))

    def login(self, email: str, password: str) -> tuple[str, UserEntity]:
        if not email or not password:
            raise ValidationError("Missing email or password.")
        user = self._users.get_by_email(email.strip().lower())
        if not user or not verify_password(password, user.password_hash):
            logger.info("Rejected login attempt")
            raise UnauthenticatedError("Invalid credentials.")
        return self._gate.issue(user), user

    def get_profile(self, user_id: int) -> UserEntity:
        user = self._users.get_user(user_id)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def update_profile(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
    ) -> tuple[UserEntity, str]:
        if not name and not email:
            raise ValidationError("At least one field (name or email) is required for update.")

        changes: dict[str, str] = {}
        if name:
            if not name.strip():
                raise ValidationError("Name cannot be blank.")
            changes["name"] = name.strip()
        if email:
            email = _clean_email(email)
            existing = self._users.get_by_email(email)
            if existing and existing.id != user_id:
                raise ConflictError("Email is already in use by another user.")
            changes["email"] = email

        user = self._users.update_user(user_id, changes)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)
        # The token carries the email, so a fresh one is handed back.
        return user, self._gate.issue(user)

    def delete_account(self, user_id: int) -> None:
        if not self._users.delete_user(user_id):
            raise NotFoundError(USER_NOT_FOUND)
