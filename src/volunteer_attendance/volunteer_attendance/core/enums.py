from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class VolunteerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class AttendanceStatus(str, Enum):
    """Mirrors presence of check_out_time on a record."""

    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"


class Transition(str, Enum):
    """Outcome of a single scan; also the activity log entry type."""

    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
