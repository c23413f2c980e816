"""Timezone-aware date helpers.

All timestamps handled by TaskHub are aware and expressed in UTC.
"""
from __future__ import annotations

import calendar
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current aware UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return *value* as aware UTC; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar *months* to *value*, clamping the day to the target month.

    Examples
    --------
    >>> add_months(datetime(2024, 1, 31, tzinfo=UTC), 1).day
    29
    >>> add_months(datetime(2024, 11, 15, tzinfo=UTC), 3).month
    2
    """
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


__all__ = ["add_months", "ensure_utc", "utc_now"]
