from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import VolunteerStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Volunteer
from .repository import VolunteerRepository

_COLUMNS = """
    volunteer_id, name, email, phone, address, skills, availability, status,
    qr_code_data, created_at, updated_at, created_by_id, updated_by_id
"""


def _to_volunteer(r: Dict[str, Any]) -> Volunteer:
    return Volunteer(
        volunteer_id=r["volunteer_id"],
        name=r["name"],
        email=r["email"],
        status=VolunteerStatus(r["status"]),
        phone=r.get("phone"),
        address=r.get("address"),
        skills=r.get("skills"),
        availability=r.get("availability"),
        qr_code_data=r.get("qr_code_data"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        created_by_id=r.get("created_by_id"),
        updated_by_id=r.get("updated_by_id"),
    )


class MySQLVolunteerRepository(VolunteerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, volunteer_id: str) -> Optional[Volunteer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM volunteers WHERE volunteer_id=%s", (volunteer_id,))
            r = fetchone(cur)
            return _to_volunteer(r) if r else None

    def get_by_email(self, email: str) -> Optional[Volunteer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM volunteers WHERE email=%s", (email,))
            r = fetchone(cur)
            return _to_volunteer(r) if r else None

    def list_all(self) -> Sequence[Volunteer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM volunteers ORDER BY created_at DESC")
            return [_to_volunteer(r) for r in fetchall(cur)]

    def create(self, volunteer: Volunteer) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO volunteers(
                    volunteer_id, name, email, phone, address, skills, availability, status,
                    qr_code_data, created_at, updated_at, created_by_id, updated_by_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    volunteer.volunteer_id,
                    volunteer.name,
                    volunteer.email,
                    volunteer.phone,
                    volunteer.address,
                    volunteer.skills,
                    volunteer.availability,
                    volunteer.status.value,
                    volunteer.qr_code_data,
                    volunteer.created_at,
                    volunteer.updated_at,
                    volunteer.created_by_id,
                    volunteer.updated_by_id,
                ),
            )

    def update(self, volunteer: Volunteer) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE volunteers
                SET name=%s, email=%s, phone=%s, address=%s, skills=%s, availability=%s,
                    status=%s, updated_at=%s, updated_by_id=%s
                WHERE volunteer_id=%s
                """,
                (
                    volunteer.name,
                    volunteer.email,
                    volunteer.phone,
                    volunteer.address,
                    volunteer.skills,
                    volunteer.availability,
                    volunteer.status.value,
                    volunteer.updated_at,
                    volunteer.updated_by_id,
                    volunteer.volunteer_id,
                ),
            )
            return cur.rowcount > 0

    def set_qr_code_data(self, volunteer_id: str, qr_code_data: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE volunteers SET qr_code_data=%s WHERE volunteer_id=%s",
                (qr_code_data, volunteer_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, volunteer_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE volunteer_id=%s", (volunteer_id,))
            cur.execute("DELETE FROM volunteers WHERE volunteer_id=%s", (volunteer_id,))
            return cur.rowcount > 0

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM volunteers")
            return int(fetchone(cur)["n"])

    def count_by_status(self, status: VolunteerStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM volunteers WHERE status=%s", (status.value,))
            return int(fetchone(cur)["n"])
