from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import ActivityLogEntry, AttendanceRecord
from .repository import AttendanceRepository, LedgerTransaction

_RECORD_COLUMNS = """
    a.attendance_id, a.volunteer_id, a.check_in_time, a.check_out_time,
    a.duration_minutes, a.status, a.recorded_by_id
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    duration = r.get("duration_minutes")
    return AttendanceRecord(
        attendance_id=r["attendance_id"],
        volunteer_id=r["volunteer_id"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        duration_minutes=int(duration) if duration is not None else None,
        status=AttendanceStatus(r["status"]),
        recorded_by_id=r.get("recorded_by_id"),
        volunteer_name=r.get("volunteer_name"),
    )


class _MySQLLedgerTransaction(LedgerTransaction):
    def __init__(self, cur):
        self._cur = cur

    def lock_volunteer(self, volunteer_id: str) -> Optional[str]:
        self._cur.execute(
            "SELECT name FROM volunteers WHERE volunteer_id=%s FOR UPDATE",
            (volunteer_id,),
        )
        r = fetchone(self._cur)
        return r["name"] if r else None

    def find_open_record(self, volunteer_id: str) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance_records a
            WHERE a.volunteer_id=%s AND a.check_out_time IS NULL
            ORDER BY a.check_in_time DESC
            LIMIT 1
            """,
            (volunteer_id,),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def insert_record(self, record: AttendanceRecord) -> None:
        self._cur.execute(
            """
            INSERT INTO attendance_records(
                attendance_id, volunteer_id, check_in_time, status, recorded_by_id
            )
            VALUES(%s,%s,%s,%s,%s)
            """,
            (
                record.attendance_id,
                record.volunteer_id,
                record.check_in_time,
                record.status.value,
                record.recorded_by_id,
            ),
        )

    def close_record(self, record: AttendanceRecord) -> bool:
        # the IS NULL guard keeps closed records immutable
        self._cur.execute(
            """
            UPDATE attendance_records
            SET check_out_time=%s, duration_minutes=%s, status=%s, recorded_by_id=%s
            WHERE attendance_id=%s AND check_out_time IS NULL
            """,
            (
                record.check_out_time,
                record.duration_minutes,
                record.status.value,
                record.recorded_by_id,
                record.attendance_id,
            ),
        )
        return self._cur.rowcount > 0

    def append_activity(self, entry: ActivityLogEntry) -> None:
        self._cur.execute(
            """
            INSERT INTO activity_logs(activity_id, type, volunteer_id, timestamp, details, recorded_by_id)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (
                entry.activity_id,
                entry.type.value,
                entry.volunteer_id,
                entry.timestamp,
                entry.details,
                entry.recorded_by_id,
            ),
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[LedgerTransaction]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield _MySQLLedgerTransaction(cur)

    def list_records(
        self,
        *,
        volunteer_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["1=1"]
        params: list = []

        if volunteer_id:
            where.append("a.volunteer_id=%s")
            params.append(volunteer_id)
        if start is not None:
            where.append("a.check_in_time >= %s")
            params.append(start)
        if end is not None:
            where.append("a.check_in_time <= %s")
            params.append(end)

        sql = f"""
            SELECT {_RECORD_COLUMNS}, v.name AS volunteer_name
            FROM attendance_records a
            LEFT JOIN volunteers v ON v.volunteer_id = a.volunteer_id
            WHERE {' AND '.join(where)}
            ORDER BY a.check_in_time DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
