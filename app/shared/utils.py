"""Shared utility functions."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def institution_today(timezone_name: str) -> date:
    """Return the current calendar date in the institution timezone."""
    return utc_now().astimezone(ZoneInfo(timezone_name)).date()
