from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import ActivityView


class DashboardRepository(Protocol):
    """Aggregate queries over the attendance ledger (read-only)."""

    def sum_closed_minutes(self, *, start: datetime, end: datetime) -> int:
        """Sum of duration over closed records whose check-in falls in [start, end]."""

        raise NotImplementedError

    def count_present_volunteers(self, *, start: datetime, end: datetime) -> int:
        """Distinct volunteers with any record (open or closed) checked in within [start, end]."""

        raise NotImplementedError

    def recent_activity(self, limit: int) -> Sequence[ActivityView]:
        raise NotImplementedError
