"""Utilities for working with business hours."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from config.calendar import DEFAULT_CALENDAR, MINUTES_PER_DAY, WeeklyCalendar

DaySegment = Tuple[int, int, int]


def _truncate(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def _minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def _day_bounds(start: datetime, end: datetime) -> List[Tuple[date, int, int]]:
    """Split ``start``/``end`` into ``(day, lower, upper)`` minute bounds.

    Steps:
    1. Truncate both instants to the minute; return nothing if ``end`` is not
       after ``start``.
    2. The first day runs from ``start``'s time of day up to ``end``'s time of
       day when both fall on the same date, otherwise up to midnight (1440).
    3. Every following day starts at 0 and runs to 1440, except the last one
       which stops at ``end``'s time of day.

    Midnight is the exclusive upper bound of one day and the inclusive lower
    bound of the next, so no minute is counted twice.  A final day whose
    upper bound is 0 (``end`` exactly at midnight) is omitted.
    """

    start = _truncate(start)
    end = _truncate(end)
    if end <= start:
        return []

    bounds = []
    day = start.date()
    last_day = end.date()
    lower = _minute_of_day(start)
    while day <= last_day:
        upper = _minute_of_day(end) if day == last_day else MINUTES_PER_DAY
        if upper > lower:
            bounds.append((day, lower, upper))
        day += timedelta(days=1)
        lower = 0
    return bounds


def day_segments(start: datetime, end: datetime) -> List[DaySegment]:
    """Return ``(weekday, lower_minute, upper_minute)`` triples covering the span."""
    return [(day.weekday(), lower, upper) for day, lower, upper in _day_bounds(start, end)]


def open_minutes_in_day(
    calendar: WeeklyCalendar, weekday: int, lower: int, upper: int
) -> int:
    """Return the open minutes of ``weekday`` between ``lower`` and ``upper``."""
    total = 0
    for w0, w1 in calendar.get(weekday, ()):
        total += max(0, min(upper, w1) - max(lower, w0))
    return total


def elapsed_open_minutes(
    start: datetime, end: datetime, calendar: Optional[WeeklyCalendar] = None
) -> int:
    """Return the minutes between ``start`` and ``end`` inside open windows.

    ``calendar`` defaults to :data:`config.calendar.DEFAULT_CALENDAR`.  Spans
    where ``end`` is not after ``start`` yield ``0``.
    """

    if calendar is None:
        calendar = DEFAULT_CALENDAR
    return sum(
        open_minutes_in_day(calendar, weekday, lower, upper)
        for weekday, lower, upper in day_segments(start, end)
    )


def business_hours_breakdown(
    start: datetime, end: datetime, calendar: Optional[WeeklyCalendar] = None
) -> List[Tuple[datetime, datetime]]:
    """Return a list of business-hour segments between ``start`` and ``end``.

    Each segment is the part of one open window that the span covers.

    Example:
        >>> from datetime import datetime
        >>> business_hours_breakdown(
        ...     datetime(2024, 1, 5, 12, 0), datetime(2024, 1, 8, 8, 0)
        ... )
        [(datetime(2024, 1, 5, 12, 0), datetime(2024, 1, 5, 12, 30)),
         (datetime(2024, 1, 8, 7, 0), datetime(2024, 1, 8, 8, 0))]
    """

    if calendar is None:
        calendar = DEFAULT_CALENDAR
    segments = []
    for day, lower, upper in _day_bounds(start, end):
        midnight = datetime(day.year, day.month, day.day)
        for w0, w1 in calendar.get(day.weekday(), ()):
            seg_start = max(lower, w0)
            seg_end = min(upper, w1)
            if seg_end > seg_start:
                segments.append(
                    (
                        midnight + timedelta(minutes=seg_start),
                        midnight + timedelta(minutes=seg_end),
                    )
                )
    return segments


def business_hours_delta(
    start: datetime, end: datetime, calendar: Optional[WeeklyCalendar] = None
) -> timedelta:
    """Return the total business time between ``start`` and ``end``."""
    return timedelta(minutes=elapsed_open_minutes(start, end, calendar))
