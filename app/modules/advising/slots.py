"""Bookable slot set and session length rules."""

from __future__ import annotations

import datetime as dt

from app.shared.exceptions import InvalidSlotException

# 12:00 is the lunch block.
BOOKABLE_START_TIMES: tuple[dt.time, ...] = (
    dt.time(9, 0),
    dt.time(10, 0),
    dt.time(11, 0),
    dt.time(13, 0),
    dt.time(14, 0),
    dt.time(15, 0),
    dt.time(16, 0),
)

SESSION_LENGTH_HOURS = 1

# Monday through Friday, as `date.weekday()` values.
WORKING_WEEKDAYS = frozenset(range(5))

KNOWN_LOCATIONS: tuple[str, ...] = (
    "Career Center, Room 203",
    "Online (Zoom)",
)


def is_bookable_start(start_time: dt.time) -> bool:
    """Return True if start time is one of the fixed slots."""
    return start_time in BOOKABLE_START_TIMES


def ensure_bookable_start(start_time: dt.time) -> dt.time:
    """Validate start time against the slot set."""
    if not is_bookable_start(start_time):
        allowed = ", ".join(slot.strftime("%H:%M") for slot in BOOKABLE_START_TIMES)
        raise InvalidSlotException(
            f"Start time {start_time.strftime('%H:%M')} is not bookable; choose one of {allowed}",
        )
    return start_time


def is_working_day(date: dt.date) -> bool:
    return date.weekday() in WORKING_WEEKDAYS


def ensure_working_day(date: dt.date) -> dt.date:
    """Reject weekend dates."""
    if not is_working_day(date):
        raise InvalidSlotException(f"{date.isoformat()} is not a working day; sessions run Monday to Friday")
    return date


def ensure_bookable_date(date: dt.date, today: dt.date) -> dt.date:
    """Reject past and weekend dates. Today is still bookable."""
    if date < today:
        raise InvalidSlotException(f"{date.isoformat()} is in the past")
    return ensure_working_day(date)


def end_time_for(start_time: dt.time) -> dt.time:
    """Return start time plus session length, wrapping past midnight."""
    return dt.time((start_time.hour + SESSION_LENGTH_HOURS) % 24, start_time.minute)
