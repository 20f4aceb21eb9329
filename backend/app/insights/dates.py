from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time
from typing import Tuple


def month_key(value: datetime | date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_start(value: datetime | date) -> datetime:
    return datetime(value.year, value.month, 1)


def shift_months(value: datetime, months: int) -> datetime:
    """Calendar month shift; the day is clamped to the target month's length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def previous_month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """First instant and last instant of the calendar month before now."""
    start = shift_months(month_start(now), -1)
    last_day = calendar.monthrange(start.year, start.month)[1]
    end = datetime.combine(date(start.year, start.month, last_day), time.max)
    return start, end


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_amount(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"
