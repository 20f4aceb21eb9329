from __future__ import annotations

from datetime import date, timedelta
from typing import AbstractSet, FrozenSet, Iterable

from backend.app.domain.records import TxnRecord


def expense_day_set(txns: Iterable[TxnRecord]) -> FrozenSet[date]:
    return frozenset(t.date for t in txns if t.is_expense)


def compute_streak(expense_dates: Iterable[date] | AbstractSet[date], today: date) -> int:
    """
    Consecutive logging days ending today, or ending yesterday when today
    has not been logged yet. Any earlier gap ends the streak.

        {today}                    -> 1
        {yesterday}                -> 1
        {today, yesterday, d-2}    -> 3
        {d-2}                      -> 0
    """
    days = expense_dates if isinstance(expense_dates, (set, frozenset)) else frozenset(expense_dates)

    cursor = today
    if cursor not in days:
        cursor = today - timedelta(days=1)
        if cursor not in days:
            return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
