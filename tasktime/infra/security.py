from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from tasktime.domain.entities import UserEntity
from tasktime.domain.errors import UnauthenticatedError

from .users import UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


class IdentityGate:
    """Issues bearer tokens and resolves them back to a stored user."""

    def __init__(self, users: UserRepository, secret: str, expires_minutes: int = 60) -> None:
        self._users = users
        self._secret = secret
        self._expires = timedelta(minutes=expires_minutes)

    def issue(self, user: UserEntity) -> str:
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "exp": datetime.now(timezone.utc) + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def resolve(self, token: str | None) -> UserEntity:
        if not token:
            raise UnauthenticatedError("No token provided.")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALG])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthenticatedError("Token expired.") from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise UnauthenticatedError("Invalid token.") from exc

        try:
            user_id = int(payload.get("sub", ""))
        except (TypeError, ValueError) as exc:
            raise UnauthenticatedError("Invalid token payload.") from exc

        user = self._users.get_user(user_id)
        if not user:
            raise UnauthenticatedError("User not found.")
        return user
