"""
Date window helpers for calendar queries.

Windows are half-open ``[start, end)`` intervals computed in the portal's
configured time zone and returned as UTC datetimes, ready to be compared with
stored ``start_date`` / ``end_date`` values.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple

DEFAULT_EVENT_COLOR = "#1a237e"

EVENT_TYPE_COLORS = {
    "exam": "#ff6b6b",
    "holiday": "#4caf50",
    "event": "#2196f3",
    "deadline": "#ff9800",
    "meeting": "#9c27b0",
    "sports": "#00bcd4",
}

Window = Tuple[datetime, datetime]


def color_for_type(event_type: Optional[str]) -> str:
    """Default display colour for an event type; unknown types get the portal blue."""
    return EVENT_TYPE_COLORS.get(event_type or "", DEFAULT_EVENT_COLOR)


def month_window(year: int, month: int, tz: tzinfo = timezone.utc) -> Window:
    """Return ``[first instant of month, first instant of next month)`` in UTC."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    start = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(year, month + 1, 1, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def start_of_day(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> datetime:
    local_now = (now or datetime.now(timezone.utc)).astimezone(tz)
    midnight = datetime(local_now.year, local_now.month, local_now.day, tzinfo=tz)
    return midnight.astimezone(timezone.utc)


def day_window(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> Window:
    """Return ``[start of today, start of tomorrow)`` in UTC."""
    start = start_of_day(now, tz)
    local_start = start.astimezone(tz)
    # Wall-clock arithmetic so DST days are 23 or 25 hours long
    tomorrow = (local_start.replace(tzinfo=None) + timedelta(days=1)).replace(tzinfo=tz)
    return start, tomorrow.astimezone(timezone.utc)


def to_storage(value: datetime) -> str:
    """Format a timestamp the way it is stored and filtered on (ISO-8601, UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def overlap_filter(window: Window, start_column: str = "start_date", end_column: str = "end_date") -> str:
    """
    PostgREST ``or`` filter matching events that intersect ``window``.

    An event matches when it starts inside the window, or when it started
    before the window and its end date reaches into it.
    """
    start, end = (to_storage(value) for value in window)
    return (
        f"and({start_column}.gte.{start},{start_column}.lt.{end}),"
        f"and({start_column}.lt.{start},{end_column}.gte.{start})"
    )
