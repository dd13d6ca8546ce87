"""Calendar-day helpers shared by the scheduler, classifier and streaks."""

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal


def to_day(value: date | datetime | str) -> date:
    """Collapse a datetime, date or ISO day string to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (to_day(end) - to_day(start)).days


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_interval(value: float) -> int:
    return int(math.floor(value + 0.5))
