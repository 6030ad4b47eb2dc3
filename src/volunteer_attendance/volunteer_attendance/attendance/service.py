from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_date_bound
from ..common.numbers import round_half_up
from ..core.constants import CONFLICT_RETRIES
from ..core.enums import AttendanceStatus, Transition
from ..core.exceptions import ConflictError, NotFoundError
from .model import ActivityLogEntry, AttendanceRecord, TransitionResult
from .payload import parse_scan_payload
from .repository import AttendanceRepository, LedgerTransaction

logger = logging.getLogger(__name__)


def duration_minutes(check_in: datetime, check_out: datetime) -> int:
    """Whole minutes between two instants, rounded half-up, never negative."""
    millis = (check_out - check_in).total_seconds() * 1000
    return max(0, round_half_up(millis / 60000))


class AttendanceLedger:
    """Use case: toggle a volunteer between checked-in and checked-out on each scan.

    The whole read-decide-write sequence runs inside one store transaction that
    holds the volunteer's row lock, so two scans for the same volunteer never
    both observe "no open record".
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        conflict_retries: int = CONFLICT_RETRIES,
    ):
        self._attendance = attendance
        self._clock = clock
        self._conflict_retries = int(conflict_retries)

    def record_scan(self, qr_data: Optional[str], acting_user_id: Optional[str] = None) -> TransitionResult:
        volunteer_id = parse_scan_payload(qr_data)

        attempt = 0
        while True:
            try:
                result = self._apply(volunteer_id, acting_user_id)
            except ConflictError:
                if attempt >= self._conflict_retries:
                    logger.error("scan for volunteer %s still conflicting after %s retries", volunteer_id, attempt)
                    raise
                attempt += 1
                logger.warning("conflict on scan for volunteer %s, retrying (%s)", volunteer_id, attempt)
                continue

            logger.info(
                "%s volunteer=%s record=%s by=%s",
                result.transition.value,
                volunteer_id,
                result.record.attendance_id,
                acting_user_id,
            )
            return result

    def _apply(self, volunteer_id: str, acting_user_id: Optional[str]) -> TransitionResult:
        with self._attendance.transaction() as tx:
            volunteer_name = tx.lock_volunteer(volunteer_id)
            if volunteer_name is None:
                raise NotFoundError("Volunteer not found")

            now = self._clock()
            open_record = tx.find_open_record(volunteer_id)
            if open_record is not None:
                record = self._check_out(tx, open_record, now, acting_user_id)
                transition = Transition.CHECK_OUT
            else:
                record = self._check_in(tx, volunteer_id, now, acting_user_id)
                transition = Transition.CHECK_IN

        return TransitionResult(
            transition=transition,
            record=replace(record, volunteer_name=volunteer_name),
            volunteer_name=volunteer_name,
        )

    def _check_in(
        self, tx: LedgerTransaction, volunteer_id: str, now: datetime, acting_user_id: Optional[str]
    ) -> AttendanceRecord:
        record = AttendanceRecord(
            attendance_id=str(uuid.uuid4()),
            volunteer_id=volunteer_id,
            check_in_time=now,
            check_out_time=None,
            duration_minutes=None,
            status=AttendanceStatus.CHECKED_IN,
            recorded_by_id=acting_user_id,
        )
        tx.insert_record(record)
        tx.append_activity(
            ActivityLogEntry(
                activity_id=str(uuid.uuid4()),
                type=Transition.CHECK_IN,
                volunteer_id=volunteer_id,
                timestamp=now,
                details="Checked in",
                recorded_by_id=acting_user_id,
            )
        )
        return record

    def _check_out(
        self, tx: LedgerTransaction, open_record: AttendanceRecord, now: datetime, acting_user_id: Optional[str]
    ) -> AttendanceRecord:
        minutes = duration_minutes(open_record.check_in_time, now)
        record = replace(
            open_record,
            check_out_time=now,
            duration_minutes=minutes,
            status=AttendanceStatus.CHECKED_OUT,
            recorded_by_id=acting_user_id,
        )
        if not tx.close_record(record):
            # someone closed it between our read and write
            raise ConflictError("Attendance record was already closed")
        tx.append_activity(
            ActivityLogEntry(
                activity_id=str(uuid.uuid4()),
                type=Transition.CHECK_OUT,
                volunteer_id=open_record.volunteer_id,
                timestamp=now,
                details=f"Checked out after {minutes} minutes",
                recorded_by_id=acting_user_id,
            )
        )
        return record

    def list_attendance(
        self,
        *,
        volunteer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end_of_day=True)
        return self._attendance.list_records(volunteer_id=volunteer_id or None, start=start, end=end)
