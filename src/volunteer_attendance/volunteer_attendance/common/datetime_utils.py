from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone
from typing import Optional

from ..core.exceptions import ValidationError

# timestamps carry millisecond precision
_END_OF_DAY = time(23, 59, 59, 999000)


def now_utc() -> datetime:
    """Current time as naive UTC, matching the DATETIME columns.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_date_bound(value: Optional[str], *, end_of_day: bool = False) -> Optional[datetime]:
    """Turn an optional query-string date into an inclusive datetime bound."""
    if not value:
        return None
    d = parse_iso_date(value.strip()[:10])
    return datetime.combine(d, _END_OF_DAY if end_of_day else time.min)


def month_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """First instant and last millisecond of the calendar month containing ``moment``."""
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    start = datetime(moment.year, moment.month, 1)
    end = datetime(moment.year, moment.month, last_day, 23, 59, 59, 999000)
    return start, end


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"
