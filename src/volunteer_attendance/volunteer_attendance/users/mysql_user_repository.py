from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, name, email, password_hash, role, created_at, updated_at
                FROM users
                WHERE user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, name, email, password_hash, role, created_at, updated_at
                FROM users
                WHERE email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, name, email, password_hash, role, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.user_id,
                    user.name,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    user.created_at,
                    user.updated_at,
                ),
            )

    def update(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, password_hash=%s, role=%s, updated_at=%s
                WHERE user_id=%s
                """,
                (user.name, user.email, user.password_hash, user.role.value, user.updated_at, user.user_id),
            )
            return cur.rowcount > 0
