from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from .model import ActivityLogEntry, AttendanceRecord


class LedgerTransaction(Protocol):
    """Unit of work for one scan.

    Everything done through one instance commits or rolls back together, and
    ``lock_volunteer`` holds the volunteer's row lock until the end of it.
    """

    def lock_volunteer(self, volunteer_id: str) -> Optional[str]:
        """Lock the volunteer row; return their name, or None if unknown."""

        raise NotImplementedError

    def find_open_record(self, volunteer_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_record(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def close_record(self, record: AttendanceRecord) -> bool:
        raise NotImplementedError

    def append_activity(self, entry: ActivityLogEntry) -> None:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def transaction(self) -> ContextManager[LedgerTransaction]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        volunteer_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records joined with the volunteer name, newest check-in first."""

        raise NotImplementedError
