from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import AttendanceStatus, Transition


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in, and its checkout once the volunteer leaves.

    ``check_out_time`` is None while the record is open. Closed records are never
    modified again.
    """

    attendance_id: str
    volunteer_id: str
    check_in_time: datetime
    check_out_time: Optional[datetime]
    duration_minutes: Optional[int]
    status: AttendanceStatus
    recorded_by_id: Optional[str] = None
    # filled by read queries that join the directory
    volunteer_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "volunteerId": self.volunteer_id,
            "volunteerName": self.volunteer_name,
            "checkInTime": to_iso(self.check_in_time),
            "checkOutTime": to_iso(self.check_out_time),
            "duration": self.duration_minutes,
            "status": self.status.value,
            "recordedById": self.recorded_by_id,
        }


@dataclass(frozen=True)
class ActivityLogEntry:
    """Append-only audit entry written alongside every transition."""

    activity_id: str
    type: Transition
    volunteer_id: str
    timestamp: datetime
    details: str
    recorded_by_id: Optional[str] = None


@dataclass(frozen=True)
class TransitionResult:
    transition: Transition
    record: AttendanceRecord
    volunteer_name: str

    @property
    def message(self) -> str:
        if self.transition == Transition.CHECK_IN:
            return "Volunteer checked in successfully"
        return "Volunteer checked out successfully"

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "transition": self.transition.value,
            "attendance": self.record.to_dict(),
            "volunteerName": self.volunteer_name,
        }
