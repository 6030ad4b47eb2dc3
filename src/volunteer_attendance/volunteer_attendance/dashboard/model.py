from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import Transition


@dataclass(frozen=True)
class DashboardStats:
    """Read-model for the dashboard header cards."""

    total_volunteers: int
    active_volunteers: int
    total_hours_this_month: int
    attendance_rate: int

    def to_dict(self) -> dict:
        return {
            "totalVolunteers": self.total_volunteers,
            "activeVolunteers": self.active_volunteers,
            "totalHoursThisMonth": self.total_hours_this_month,
            "attendanceRate": self.attendance_rate,
        }


@dataclass(frozen=True)
class ActivityView:
    """Activity log entry joined with the volunteer's current name (None once deleted)."""

    activity_id: str
    type: Transition
    volunteer_id: str
    volunteer_name: Optional[str]
    timestamp: datetime
    details: str

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "type": self.type.value,
            "volunteerId": self.volunteer_id,
            "volunteerName": self.volunteer_name,
            "timestamp": to_iso(self.timestamp),
            "details": self.details,
        }
