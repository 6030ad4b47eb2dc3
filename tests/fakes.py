from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from volunteer_attendance.attendance.model import ActivityLogEntry, AttendanceRecord
from volunteer_attendance.core.enums import VolunteerStatus
from volunteer_attendance.core.exceptions import ConflictError, StoreTimeoutError
from volunteer_attendance.dashboard.model import ActivityView
from volunteer_attendance.users.model import User
from volunteer_attendance.volunteers.model import Volunteer


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryStore:
    """Tables shared by the fake repositories.

    Ledger transactions buffer their writes and apply them on commit, hold a
    per-volunteer lock like SELECT ... FOR UPDATE, and reject a second open
    record for a volunteer like the unique index does.
    """

    def __init__(self):
        self.volunteers: dict[str, Volunteer] = {}
        self.records: dict[str, AttendanceRecord] = {}
        self.activity: list[ActivityLogEntry] = []
        self.users: dict[str, User] = {}

        # fault injection: number of commits to fail with each error
        self.conflicts_to_raise = 0
        self.timeouts_to_raise = 0
        self.commits = 0

        self._row_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._guard = threading.Lock()
        # set to False to emulate a store without row locks
        self.row_locking = True

    def add_volunteer(self, volunteer_id: str, name: str, *, status=VolunteerStatus.ACTIVE, created_at=None) -> Volunteer:
        v = Volunteer(
            volunteer_id=volunteer_id,
            name=name,
            email=f"{volunteer_id.lower()}@example.org",
            status=status,
            created_at=created_at or datetime(2026, 1, 1, 8, 0, 0),
            updated_at=created_at or datetime(2026, 1, 1, 8, 0, 0),
        )
        self.volunteers[volunteer_id] = v
        return v

    def open_records(self, volunteer_id: str) -> list[AttendanceRecord]:
        return [r for r in self.records.values() if r.volunteer_id == volunteer_id and r.is_open]

    def records_for(self, volunteer_id: str) -> list[AttendanceRecord]:
        return [r for r in self.records.values() if r.volunteer_id == volunteer_id]

    @property
    def write_count(self) -> int:
        return len(self.records) + len(self.activity)

    def row_lock(self, volunteer_id: str) -> threading.Lock:
        with self._guard:
            return self._row_locks[volunteer_id]

    def commit(self, records: dict[str, AttendanceRecord], activity: list[ActivityLogEntry]) -> None:
        with self._guard:
            if self.timeouts_to_raise > 0:
                self.timeouts_to_raise -= 1
                raise StoreTimeoutError("Database operation timed out (1205)")
            if self.conflicts_to_raise > 0:
                self.conflicts_to_raise -= 1
                raise ConflictError("Concurrent update conflict (1213)")

            merged = {**self.records, **records}
            for rec in records.values():
                if rec.is_open:
                    others = [
                        r for r in merged.values()
                        if r.volunteer_id == rec.volunteer_id and r.is_open and r.attendance_id != rec.attendance_id
                    ]
                    if others:
                        raise ConflictError("Concurrent update conflict (1062)")

            self.records.update(records)
            self.activity.extend(activity)
            self.commits += 1


class _FakeLedgerTransaction:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._records: dict[str, AttendanceRecord] = {}
        self._activity: list[ActivityLogEntry] = []
        self._held: list[threading.Lock] = []

    def lock_volunteer(self, volunteer_id: str) -> Optional[str]:
        if self._store.row_locking:
            lock = self._store.row_lock(volunteer_id)
            lock.acquire()
            self._held.append(lock)
        v = self._store.volunteers.get(volunteer_id)
        return v.name if v else None

    def _visible(self) -> dict[str, AttendanceRecord]:
        return {**self._store.records, **self._records}

    def find_open_record(self, volunteer_id: str) -> Optional[AttendanceRecord]:
        open_records = [r for r in self._visible().values() if r.volunteer_id == volunteer_id and r.is_open]
        open_records.sort(key=lambda r: r.check_in_time, reverse=True)
        return open_records[0] if open_records else None

    def insert_record(self, record: AttendanceRecord) -> None:
        self._records[record.attendance_id] = record

    def close_record(self, record: AttendanceRecord) -> bool:
        current = self._visible().get(record.attendance_id)
        if not current or not current.is_open:
            return False
        self._records[record.attendance_id] = record
        return True

    def append_activity(self, entry: ActivityLogEntry) -> None:
        self._activity.append(entry)

    def commit(self) -> None:
        self._store.commit(self._records, self._activity)

    def release(self) -> None:
        while self._held:
            self._held.pop().release()


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._store = store

    @contextmanager
    def transaction(self):
        tx = _FakeLedgerTransaction(self._store)
        try:
            yield tx
            tx.commit()
        finally:
            tx.release()

    def list_records(self, *, volunteer_id=None, start=None, end=None, limit=None):
        items = list(self._store.records.values())
        if volunteer_id:
            items = [r for r in items if r.volunteer_id == volunteer_id]
        if start is not None:
            items = [r for r in items if r.check_in_time >= start]
        if end is not None:
            items = [r for r in items if r.check_in_time <= end]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        if limit is not None:
            items = items[:limit]

        def with_name(r: AttendanceRecord) -> AttendanceRecord:
            v = self._store.volunteers.get(r.volunteer_id)
            return replace(r, volunteer_name=v.name if v else None)

        return [with_name(r) for r in items]


class InMemoryVolunteers:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, volunteer_id: str) -> Optional[Volunteer]:
        return self._store.volunteers.get(volunteer_id)

    def get_by_email(self, email: str) -> Optional[Volunteer]:
        for v in self._store.volunteers.values():
            if v.email == email:
                return v
        return None

    def list_all(self):
        return sorted(self._store.volunteers.values(), key=lambda v: v.created_at, reverse=True)

    def create(self, volunteer: Volunteer) -> None:
        self._store.volunteers[volunteer.volunteer_id] = volunteer

    def update(self, volunteer: Volunteer) -> bool:
        if volunteer.volunteer_id not in self._store.volunteers:
            return False
        self._store.volunteers[volunteer.volunteer_id] = volunteer
        return True

    def set_qr_code_data(self, volunteer_id: str, qr_code_data: str) -> bool:
        v = self._store.volunteers.get(volunteer_id)
        if not v:
            return False
        self._store.volunteers[volunteer_id] = replace(v, qr_code_data=qr_code_data)
        return True

    def delete_by_id(self, volunteer_id: str) -> bool:
        for rid in [r.attendance_id for r in self._store.records_for(volunteer_id)]:
            del self._store.records[rid]
        return self._store.volunteers.pop(volunteer_id, None) is not None

    def count_all(self) -> int:
        return len(self._store.volunteers)

    def count_by_status(self, status: VolunteerStatus) -> int:
        return sum(1 for v in self._store.volunteers.values() if v.status == status)


class InMemoryDashboard:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def sum_closed_minutes(self, *, start, end) -> int:
        return sum(
            r.duration_minutes
            for r in self._store.records.values()
            if start <= r.check_in_time <= end and r.duration_minutes is not None
        )

    def count_present_volunteers(self, *, start, end) -> int:
        return len({r.volunteer_id for r in self._store.records.values() if start <= r.check_in_time <= end})

    def recent_activity(self, limit: int):
        items = sorted(self._store.activity, key=lambda a: a.timestamp, reverse=True)[:limit]
        views = []
        for a in items:
            v = self._store.volunteers.get(a.volunteer_id)
            views.append(
                ActivityView(
                    activity_id=a.activity_id,
                    type=a.type,
                    volunteer_id=a.volunteer_id,
                    volunteer_name=v.name if v else None,
                    timestamp=a.timestamp,
                    details=a.details,
                )
            )
        return views


class InMemoryUsers:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._store.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self._store.users.values():
            if u.email == email:
                return u
        return None

    def create(self, user: User) -> None:
        self._store.users[user.user_id] = user

    def update(self, user: User) -> bool:
        if user.user_id not in self._store.users:
            return False
        self._store.users[user.user_id] = user
        return True
