from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import Transition
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ActivityView
from .repository import DashboardRepository


class MySQLDashboardRepository(DashboardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def sum_closed_minutes(self, *, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(duration_minutes), 0) AS minutes
                FROM attendance_records
                WHERE check_in_time BETWEEN %s AND %s
                  AND duration_minutes IS NOT NULL
                """,
                (start, end),
            )
            return int(fetchone(cur)["minutes"])

    def count_present_volunteers(self, *, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(DISTINCT volunteer_id) AS n
                FROM attendance_records
                WHERE check_in_time BETWEEN %s AND %s
                """,
                (start, end),
            )
            return int(fetchone(cur)["n"])

    def recent_activity(self, limit: int) -> Sequence[ActivityView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT l.activity_id, l.type, l.volunteer_id, v.name AS volunteer_name,
                       l.timestamp, l.details
                FROM activity_logs l
                LEFT JOIN volunteers v ON v.volunteer_id = l.volunteer_id
                ORDER BY l.timestamp DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                ActivityView(
                    activity_id=r["activity_id"],
                    type=Transition(r["type"]),
                    volunteer_id=r["volunteer_id"],
                    volunteer_name=r.get("volunteer_name"),
                    timestamp=r["timestamp"],
                    details=r["details"],
                )
                for r in fetchall(cur)
            ]
