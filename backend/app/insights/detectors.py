"""
Insight detectors.

Each detector is a pure function: it takes a user's records plus the
current local time and returns the insights it would like to create, in a
stable order. Whether a draft is actually persisted (the "already exists"
check) is decided by the engine service, one draft at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from backend.app.domain.records import BudgetRecord, TxnRecord

from .dates import (
    format_amount,
    month_key,
    month_start,
    previous_month_bounds,
    round_half_up,
    shift_months,
)
from .schema import DetectorDefinition, InsightDraft


OVERSPEND_RATIO = 0.9
RECURRING_LOOKBACK_MONTHS = 3
RECURRING_MIN_OCCURRENCES = 3
RECURRING_DEFAULT_FREQUENCY = "monthly"
HABITUAL_MIN_OCCURRENCES = 4
HABITUAL_CUT_RATIO = 0.9

# Discriminator used for whole-month (category-less) budgets.
OVERALL_BUDGET_KEY = "*"

OVERSPEND = DetectorDefinition(
    detector_id="overspend",
    insight_type="alert",
    blocking_statuses=("pending",),
)
RECURRING = DetectorDefinition(
    detector_id="recurring",
    insight_type="recurring_transaction",
    blocking_statuses=("pending", "approved"),
)
BUDGET_ADJUST = DetectorDefinition(
    detector_id="budget_adjust",
    insight_type="budget_adjust",
    blocking_statuses=("pending",),
)

DETECTOR_ORDER: Tuple[DetectorDefinition, ...] = (OVERSPEND, RECURRING, BUDGET_ADJUST)


def _expenses(txns: Iterable[TxnRecord]) -> List[TxnRecord]:
    return sorted((t for t in txns if t.is_expense), key=lambda t: t.occurred_at)


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


# -------------------------
# Overspend
# -------------------------

def detect_overspend(
    txns: Iterable[TxnRecord],
    budgets: Iterable[BudgetRecord],
    *,
    now: datetime,
) -> List[InsightDraft]:
    """
    Budget-threshold alerting for the current calendar month.

    For every budget of the current month, spent is the month-to-date sum of
    expenses in the budget's category; a budget without a category counts
    every expense. Fires at >= 90% of the budget amount.
    """
    start = month_start(now)
    current_month = month_key(now)
    month_expenses = [t for t in _expenses(txns) if t.occurred_at >= start]

    drafts: List[InsightDraft] = []
    for budget in budgets:
        if budget.month != current_month or budget.amount <= 0:
            continue

        if budget.category is None:
            spent = sum(t.amount for t in month_expenses)
        else:
            spent = sum(t.amount for t in month_expenses if t.category == budget.category)

        if spent < budget.amount * OVERSPEND_RATIO:
            continue

        label = budget.category or "Overall"
        pct_used = round_half_up(spent / budget.amount * 100)
        drafts.append(
            InsightDraft(
                type="alert",
                discriminator=budget.category or OVERALL_BUDGET_KEY,
                title=f"Approaching Budget Limit: {label}",
                message=f"You have spent {pct_used}% of your {label} budget.",
                data={
                    "category": budget.category,
                    "limit": budget.amount,
                    "current": spent,
                },
                confidence="high",
            )
        )
    return drafts


# -------------------------
# Recurring charges
# -------------------------

def _recurring_key(txn: TxnRecord) -> Tuple[str, float]:
    return (txn.description or "").strip().lower(), float(txn.amount)


def detect_recurring(
    txns: Iterable[TxnRecord],
    *,
    now: datetime,
    currency: str = "₹",
) -> List[InsightDraft]:
    """
    Frequency-grouping heuristic over the last three calendar months.

    Expenses not yet flagged recurring are grouped by normalized description
    and exact amount; any group seen three or more times is proposed as a
    monthly recurring charge, represented by its earliest occurrence.
    """
    since = shift_months(now, -RECURRING_LOOKBACK_MONTHS)
    groups: Dict[Tuple[str, float], List[TxnRecord]] = {}
    for txn in _expenses(txns):
        if txn.occurred_at < since or txn.is_recurring:
            continue
        if _clean_description(txn.description) is None:
            continue
        groups.setdefault(_recurring_key(txn), []).append(txn)

    drafts: List[InsightDraft] = []
    for occurrences in groups.values():
        if len(occurrences) < RECURRING_MIN_OCCURRENCES:
            continue
        sample = occurrences[0]
        drafts.append(
            InsightDraft(
                type="recurring_transaction",
                discriminator=sample.description,
                title=f"Recurring Expense Detected: {sample.description}",
                message=(
                    f"You've spent {currency}{format_amount(sample.amount)} on \"{sample.description}\" "
                    f"{len(occurrences)} times recently. Should I mark this as recurring?"
                ),
                data={
                    "description": sample.description,
                    "amount": sample.amount,
                    "category": sample.category,
                    "frequency": RECURRING_DEFAULT_FREQUENCY,
                },
                confidence="high",
            )
        )
    return drafts


# -------------------------
# Habitual merchants
# -------------------------

@dataclass
class MerchantGroup:
    description: str
    count: int = 0
    total: float = 0.0
    category: Optional[str] = None


def group_prior_month_merchants(txns: Iterable[TxnRecord], *, now: datetime) -> List[MerchantGroup]:
    start, end = previous_month_bounds(now)
    groups: Dict[str, MerchantGroup] = {}
    for txn in _expenses(txns):
        if not (start <= txn.occurred_at <= end):
            continue
        description = _clean_description(txn.description)
        if description is None:
            continue
        group = groups.setdefault(description, MerchantGroup(description=description))
        group.count += 1
        group.total += float(txn.amount)
        if group.category is None and txn.category:
            group.category = txn.category
    return list(groups.values())


def detect_budget_adjustments(
    txns: Iterable[TxnRecord],
    *,
    now: datetime,
    currency: str = "₹",
) -> List[InsightDraft]:
    """
    Propose a 10% tighter category budget for merchants used four or more
    times last month. Groups without a category are skipped.
    """
    current_month = month_key(now)
    drafts: List[InsightDraft] = []
    for group in group_prior_month_merchants(txns, now=now):
        if group.count < HABITUAL_MIN_OCCURRENCES or not group.category:
            continue
        proposed_limit = round_half_up(group.total * HABITUAL_CUT_RATIO)
        drafts.append(
            InsightDraft(
                type="budget_adjust",
                discriminator=group.category,
                title=f"Spending Habit Detected: {group.description}",
                message=(
                    f"You spent {currency}{format_amount(group.total)} on {group.description} "
                    f"({group.count} times) last month. I can set a {group.category} budget of "
                    f"{currency}{proposed_limit} for this month to help you save. Approve?"
                ),
                data={
                    "category": group.category,
                    "newLimit": proposed_limit,
                    "month": current_month,
                    "merchant": group.description,
                },
                confidence="medium",
            )
        )
    return drafts
