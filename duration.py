"""Total-hours computation for shop-floor records.

A record's duration is either the calendar-restricted business time between
its start and end (:func:`time_utils.elapsed_open_minutes`) or the raw
wall-clock difference.  The operator's manual adjustment (overtime) is added
afterwards and the result is floored at zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from config.calendar import WeeklyCalendar
from time_utils import elapsed_open_minutes

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class DurationPolicy(Enum):
    CALENDAR_RESTRICTED = "calendar"
    RAW_ELAPSED = "raw"

    @classmethod
    def for_raw_elapsed(cls, raw_elapsed: bool) -> "DurationPolicy":
        return cls.RAW_ELAPSED if raw_elapsed else cls.CALENDAR_RESTRICTED


class SpanState(Enum):
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class TimeSpan:
    start: datetime
    end: Optional[datetime] = None

    @property
    def state(self) -> SpanState:
        return SpanState.IN_PROGRESS if self.end is None else SpanState.FINISHED


def parse_timestamp(date_str: str, time_str: str) -> datetime:
    """Combine ``"YYYY-MM-DD"`` and ``"HH:MM"`` into a naive datetime.

    Raises:
        ValueError: if either part is malformed.
    """
    return datetime.strptime(
        f"{date_str.strip()} {time_str.strip()[:5]}", f"{DATE_FORMAT} {TIME_FORMAT}"
    )


def parse_adjustment(value) -> float:
    """Return ``value`` as hours; ``None`` and blank strings mean ``0.0``."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return 0.0
    return float(value)


def compute_total_hours(
    span: TimeSpan,
    calendar: Optional[WeeklyCalendar] = None,
    manual_adjustment: float = 0.0,
    policy: DurationPolicy = DurationPolicy.CALENDAR_RESTRICTED,
) -> float:
    """Return the hours of ``span`` under ``policy`` plus ``manual_adjustment``.

    Raises:
        ValueError: if ``span`` is still in progress.
    """

    if span.end is None:
        raise ValueError("cannot compute hours of an in-progress span")
    if policy is DurationPolicy.RAW_ELAPSED:
        base = max(0.0, (span.end - span.start).total_seconds() / 3600.0)
    else:
        base = elapsed_open_minutes(span.start, span.end, calendar) / 60.0
    return max(0.0, base + manual_adjustment)


def preview_total_hours(
    start_date: Optional[str],
    start_time: Optional[str],
    end_date: Optional[str],
    end_time: Optional[str],
    manual_adjustment=None,
    policy: DurationPolicy = DurationPolicy.CALENDAR_RESTRICTED,
    calendar: Optional[WeeklyCalendar] = None,
) -> Optional[float]:
    """Return the live total for form input, or ``None`` while input is incomplete."""
    if not (start_date and start_time and end_date and end_time):
        return None
    span = TimeSpan(
        parse_timestamp(start_date, start_time), parse_timestamp(end_date, end_time)
    )
    return compute_total_hours(
        span, calendar, parse_adjustment(manual_adjustment), policy
    )
