"""
Spending-behavior analysis.

A read-only pass over the last few calendar months of expenses: where in
the day the money goes, whether weekends cost more than weekdays, and how
many purchases look impulsive. Nothing here is persisted; the findings are
returned to the caller as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from backend.app.domain.records import TxnRecord

from .dates import month_start, round_half_up, shift_months


BEHAVIOR_LOOKBACK_MONTHS = 3
WEEKEND_DAYS = (5, 6)
WEEKEND_SPENDER_RATIO = 1.5

LATE_NIGHT_FROM_HOUR = 23
LATE_NIGHT_UNTIL_HOUR = 5
LATE_NIGHT_MIN_AMOUNT = 500
WANTS_KEYWORDS = ("shopping", "entertainment")
WANTS_MIN_AMOUNT = 2000
IMPULSE_MIN_COUNT = 3

# (bucket, first hour, end hour); anything outside falls into "night"
TIME_BUCKETS: Tuple[Tuple[str, int, int], ...] = (
    ("morning", 6, 12),
    ("afternoon", 12, 18),
    ("evening", 18, 23),
)
NIGHT_BUCKET = "night"


@dataclass(frozen=True)
class BehaviorFinding:
    type: str
    title: str
    message: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class BehaviorReport:
    time_buckets: Dict[str, float]
    weekend_total: float
    weekday_total: float
    impulse_count: int
    findings: List[BehaviorFinding] = field(default_factory=list)


def time_bucket(hour: int) -> str:
    for name, start, end in TIME_BUCKETS:
        if start <= hour < end:
            return name
    return NIGHT_BUCKET


def is_impulse_candidate(txn: TxnRecord) -> bool:
    hour = txn.occurred_at.hour
    if (hour >= LATE_NIGHT_FROM_HOUR or hour < LATE_NIGHT_UNTIL_HOUR) and txn.amount > LATE_NIGHT_MIN_AMOUNT:
        return True
    category = (txn.category or "").lower()
    return any(word in category for word in WANTS_KEYWORDS) and txn.amount > WANTS_MIN_AMOUNT


def _peak_bucket(buckets: Dict[str, float]) -> Tuple[str, float]:
    # later buckets win ties
    peak_name, peak_amount = "", 0.0
    for name, amount in buckets.items():
        if not peak_name or amount >= peak_amount:
            peak_name, peak_amount = name, amount
    return peak_name, peak_amount


def analyze_behavior(txns: Iterable[TxnRecord], *, now: datetime) -> Optional[BehaviorReport]:
    """
    Analyze expenses since the start of the month three months before now.
    Returns None when there are no expenses in the window.
    """
    since = shift_months(month_start(now), -BEHAVIOR_LOOKBACK_MONTHS)
    expenses = [t for t in txns if t.is_expense and t.occurred_at >= since]
    if not expenses:
        return None

    buckets: Dict[str, float] = {name: 0.0 for name, _, _ in TIME_BUCKETS}
    buckets[NIGHT_BUCKET] = 0.0
    weekend_total = weekday_total = 0.0
    weekend_count = weekday_count = 0
    impulses: List[TxnRecord] = []

    for txn in expenses:
        buckets[time_bucket(txn.occurred_at.hour)] += txn.amount
        if txn.occurred_at.weekday() in WEEKEND_DAYS:
            weekend_total += txn.amount
            weekend_count += 1
        else:
            weekday_total += txn.amount
            weekday_count += 1
        if is_impulse_candidate(txn):
            impulses.append(txn)

    findings: List[BehaviorFinding] = []

    peak_name, peak_amount = _peak_bucket(buckets)
    total = weekend_total + weekday_total
    if peak_amount > 0:
        findings.append(
            BehaviorFinding(
                type="time",
                title="Peak Spending Time",
                message=(
                    f"You spend most during the {peak_name} "
                    f"({round_half_up(peak_amount / total * 100)}% of total)."
                ),
                data=dict(buckets),
            )
        )

    avg_weekend = weekend_total / weekend_count if weekend_count else 0.0
    avg_weekday = weekday_total / weekday_count if weekday_count else 0.0
    if avg_weekday > 0 and avg_weekend > avg_weekday * WEEKEND_SPENDER_RATIO:
        findings.append(
            BehaviorFinding(
                type="weekend",
                title="Weekend Spender",
                message=f"You spend {round_half_up(avg_weekend / avg_weekday)}x more on weekends than weekdays.",
                data={"weekend": weekend_total, "weekday": weekday_total},
            )
        )

    if len(impulses) >= IMPULSE_MIN_COUNT:
        findings.append(
            BehaviorFinding(
                type="impulse",
                title="Impulse Patterns",
                message=f"Detected {len(impulses)} potential impulse buys, mostly late at night.",
                data={"count": len(impulses), "total": sum(t.amount for t in impulses)},
            )
        )

    return BehaviorReport(
        time_buckets=buckets,
        weekend_total=weekend_total,
        weekday_total=weekday_total,
        impulse_count=len(impulses),
        findings=findings,
    )
