from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_utc
from ..common.numbers import percentage, round_half_up
from ..core.constants import DEFAULT_ACTIVITY_LIMIT
from ..core.enums import VolunteerStatus
from ..core.exceptions import ValidationError
from ..volunteers.repository import VolunteerRepository
from .model import ActivityView, DashboardStats
from .repository import DashboardRepository


class DashboardService:
    """Use case: headline statistics and the recent activity feed."""

    def __init__(
        self,
        volunteers: VolunteerRepository,
        dashboard: DashboardRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._volunteers = volunteers
        self._dashboard = dashboard
        self._clock = clock

    def compute_stats(
        self,
        period_start: Optional[datetime] = None,
        period_end: Optional[datetime] = None,
    ) -> DashboardStats:
        """Stats for ``[period_start, period_end]``; defaults to the current UTC month."""
        default_start, default_end = month_bounds(self._clock())
        start = period_start or default_start
        end = period_end or default_end
        if start > end:
            raise ValidationError("Period start must not be after period end")

        total = self._volunteers.count_all()
        active = self._volunteers.count_by_status(VolunteerStatus.ACTIVE)
        minutes = self._dashboard.sum_closed_minutes(start=start, end=end)
        present = self._dashboard.count_present_volunteers(start=start, end=end)

        return DashboardStats(
            total_volunteers=total,
            active_volunteers=active,
            total_hours_this_month=max(0, round_half_up(minutes / 60)),
            # inactive volunteers who still attended can push this past 100
            attendance_rate=percentage(present, active),
        )

    def list_recent_activity(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> Sequence[ActivityView]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer")
        return self._dashboard.recent_activity(limit)
