"""Calendar boundaries in the user's local time zone.

Reset logic compares local dates, never UTC instants: a quest completed at
23:30 local time on Monday belongs to Monday even when UTC already says
Tuesday.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class CalendarWindow:
    """The four dates the reset engine branches on."""

    today: date
    yesterday: date
    start_of_week: date  # Monday
    start_of_month: date

    @classmethod
    def for_date(cls, today: date) -> CalendarWindow:
        return cls(
            today=today,
            yesterday=today - timedelta(days=1),
            start_of_week=today - timedelta(days=today.weekday()),
            start_of_month=today.replace(day=1),
        )

    @classmethod
    def now(cls, timezone_name: str = "UTC") -> CalendarWindow:
        return cls.for_date(datetime.now(ZoneInfo(timezone_name)).date())


def local_date_from_iso(
    value: Optional[str], timezone_name: str = "UTC"
) -> Optional[date]:
    """ISO date or timestamp -> local calendar date. None/garbage -> None.

    Date-only strings are taken as already local. Naive timestamps are
    treated as UTC.
    """
    if not value:
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo("UTC"))
    return parsed.astimezone(ZoneInfo(timezone_name)).date()
