"""Weekly open-window calendar used by the business-hours clock.

The calendar maps ``datetime.weekday()`` numbers (Monday is ``0``) to an
ascending tuple of disjoint ``(start_minute, end_minute)`` windows counted
from local midnight.  Days without an entry have no open minutes.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from .settings import load_config

Window = Tuple[int, int]
WeeklyCalendar = Mapping[int, Tuple[Window, ...]]

MINUTES_PER_DAY = 24 * 60

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_FULL_DAY = ((7 * 60, 12 * 60), (13 * 60, 17 * 60 + 30))
_FRIDAY = ((7 * 60, 12 * 60 + 30),)

DEFAULT_CALENDAR: WeeklyCalendar = MappingProxyType(
    {0: _FULL_DAY, 1: _FULL_DAY, 2: _FULL_DAY, 3: _FULL_DAY, 4: _FRIDAY}
)


def _parse_clock(value) -> int:
    if isinstance(value, int):
        minutes = value
    else:
        hours, _, mins = str(value).partition(":")
        minute = int(mins or 0)
        if not 0 <= minute <= 59:
            raise ValueError(f"minutes out of range: {value!r}")
        minutes = int(hours) * 60 + minute
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"time of day out of range: {value!r}")
    return minutes


def _weekday_index(key) -> int:
    if isinstance(key, int) or str(key).isdigit():
        index = int(key)
    else:
        try:
            index = WEEKDAY_NAMES.index(str(key)[:3].lower())
        except ValueError:
            raise ValueError(f"unknown weekday: {key!r}") from None
    if not 0 <= index <= 6:
        raise ValueError(f"unknown weekday: {key!r}")
    return index


def build_calendar(days: Mapping[object, Iterable]) -> WeeklyCalendar:
    """Return an immutable calendar from a ``{weekday: [[start, end], ...]}`` map.

    Weekdays may be given as ``0``-``6`` or names such as ``"mon"``; window
    bounds as minutes or ``"HH:MM"`` strings.  Windows must be non-empty,
    ascending and must not overlap.
    """

    table: Dict[int, Tuple[Window, ...]] = {}
    for key, raw_windows in days.items():
        weekday = _weekday_index(key)
        windows = tuple((_parse_clock(a), _parse_clock(b)) for a, b in raw_windows)
        previous_end = 0
        for start, end in windows:
            if end <= start:
                raise ValueError(f"empty window {start}-{end} on {WEEKDAY_NAMES[weekday]}")
            if start < previous_end:
                raise ValueError(f"overlapping or unordered windows on {WEEKDAY_NAMES[weekday]}")
            previous_end = end
        if windows:
            table[weekday] = windows
    return MappingProxyType(table)


def load_calendar(config=None) -> WeeklyCalendar:
    """Return the calendar from the ``"calendar"`` config key or the default."""
    if config is None:
        config = load_config()
    days = config.get("calendar")
    if not days:
        return DEFAULT_CALENDAR
    return build_calendar(days)
