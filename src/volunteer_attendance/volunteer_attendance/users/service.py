from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_email, require_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # placeholder or corrupted hash values in the table
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    name: str
    role: Role


class AuthService:
    """Use case: authenticate a user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not _password_matches(user.password_hash, password):
            logger.info("failed login for %s", user.email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        return SessionUser(user_id=user.user_id, name=user.name, role=user.role)


class UserService:
    """Use case: register accounts and manage one's own profile."""

    def __init__(self, users: UserRepository, *, clock: Callable[[], object] = now_utc):
        self._users = users
        self._clock = clock

    def register(self, *, name: str, email: str, password: str, role: Optional[str] = None) -> User:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        user_role = require_enum(Role, role or Role.USER.value, "Role")

        if self._users.get_by_email(email):
            raise ValidationError("Email already in use")

        now = self._clock()
        user = User(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=user_role,
            created_at=now,
            updated_at=now,
        )
        self._users.create(user)
        logger.info("user registered: %s (%s)", user.user_id, user_role.value)
        return user

    def get_profile(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> User:
        user = self.get_profile(user_id)

        new_name = require_non_empty(name, "Name") if name is not None else user.name
        new_email = require_email(email) if email is not None else user.email
        if new_email != user.email:
            other = self._users.get_by_email(new_email)
            if other and other.user_id != user_id:
                raise ValidationError("Email already in use")

        password_hash = user.password_hash
        if new_password:
            if not current_password:
                raise ValidationError("Current password is required to set a new password")
            if not _password_matches(user.password_hash, current_password):
                raise AuthenticationError("Current password is incorrect")
            require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(new_password)

        updated = replace(
            user,
            name=new_name,
            email=new_email,
            password_hash=password_hash,
            updated_at=self._clock(),
        )
        if not self._users.update(updated):
            raise NotFoundError("User not found")
        return updated
