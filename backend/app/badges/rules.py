"""
Badge rule kinds.

Every badge condition is one of a closed set of frozen rule dataclasses
carrying typed parameters. `evaluate_rule` dispatches on the rule's class;
the evaluators below are pure functions of (rule, context).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import cached_property
from typing import Callable, Dict, FrozenSet, Literal, Optional, Tuple, Type

from backend.app.domain.records import TxnRecord, UserSnapshot
from backend.app.insights.dates import month_key

from .streak import compute_streak, expense_day_set


SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class RuleContext:
    snapshot: UserSnapshot
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def current_month(self) -> str:
        return month_key(self.now)

    @cached_property
    def expense_days(self) -> FrozenSet[date]:
        return expense_day_set(self.snapshot.transactions)

    @cached_property
    def month_to_date(self) -> Tuple[TxnRecord, ...]:
        month = self.current_month
        return tuple(t for t in self.snapshot.transactions if month_key(t.occurred_at) == month)


# -------------------------
# Rule kinds
# -------------------------

@dataclass(frozen=True)
class TransactionCountRule:
    min_count: int


@dataclass(frozen=True)
class MonthlySavingsRule:
    min_savings: float


@dataclass(frozen=True)
class StreakRule:
    min_days: int


@dataclass(frozen=True)
class ExistenceRule:
    collection: Literal["budgets", "goals"]


@dataclass(frozen=True)
class UnderBudgetRule:
    from_day: int = 25


@dataclass(frozen=True)
class CategoryKeywordRule:
    keywords: FrozenSet[str]
    min_count: int


@dataclass(frozen=True)
class CategoryAmountBelowRule:
    category: str
    max_amount: float


@dataclass(frozen=True)
class AmountAboveRule:
    min_amount: float


@dataclass(frozen=True)
class TimeOfDayRule:
    before_hour: Optional[int] = None
    from_hour: Optional[int] = None


@dataclass(frozen=True)
class ForeignCurrencyRule:
    home_currency: str


@dataclass(frozen=True)
class RecurringRule:
    pass


@dataclass(frozen=True)
class WeekendCoverageRule:
    pass


@dataclass(frozen=True)
class SpendGapRule:
    pass


# -------------------------
# Evaluators
# -------------------------

def _category(txn: TxnRecord) -> Optional[str]:
    return txn.category.lower() if txn.category else None


def _transaction_count(rule: TransactionCountRule, ctx: RuleContext) -> bool:
    return len(ctx.snapshot.transactions) >= rule.min_count


def _monthly_savings(rule: MonthlySavingsRule, ctx: RuleContext) -> bool:
    income = sum(t.amount for t in ctx.month_to_date if t.is_income)
    expense = sum(t.amount for t in ctx.month_to_date if t.is_expense)
    return (income - expense) >= rule.min_savings


def _streak(rule: StreakRule, ctx: RuleContext) -> bool:
    return compute_streak(ctx.expense_days, ctx.today) >= rule.min_days


def _existence(rule: ExistenceRule, ctx: RuleContext) -> bool:
    return len(getattr(ctx.snapshot, rule.collection)) > 0


def _under_budget(rule: UnderBudgetRule, ctx: RuleContext) -> bool:
    if ctx.today.day < rule.from_day:
        return False
    budget = next(
        (b for b in ctx.snapshot.budgets if b.month == ctx.current_month and not b.category),
        None,
    )
    if budget is None:
        return False
    spent = sum(t.amount for t in ctx.month_to_date if t.is_expense)
    return spent <= budget.amount


def _category_keyword(rule: CategoryKeywordRule, ctx: RuleContext) -> bool:
    matches = sum(1 for t in ctx.snapshot.transactions if _category(t) in rule.keywords)
    return matches >= rule.min_count


def _category_amount_below(rule: CategoryAmountBelowRule, ctx: RuleContext) -> bool:
    wanted = rule.category.lower()
    return any(
        t.is_expense and _category(t) == wanted and t.amount < rule.max_amount
        for t in ctx.snapshot.transactions
    )


def _amount_above(rule: AmountAboveRule, ctx: RuleContext) -> bool:
    return any(t.is_expense and t.amount > rule.min_amount for t in ctx.snapshot.transactions)


def _time_of_day(rule: TimeOfDayRule, ctx: RuleContext) -> bool:
    if rule.before_hour is None and rule.from_hour is None:
        raise ValueError("TimeOfDayRule needs before_hour or from_hour")
    for txn in ctx.snapshot.transactions:
        hour = txn.occurred_at.hour
        if rule.before_hour is not None and hour < rule.before_hour:
            return True
        if rule.from_hour is not None and hour >= rule.from_hour:
            return True
    return False


def _foreign_currency(rule: ForeignCurrencyRule, ctx: RuleContext) -> bool:
    home = rule.home_currency.upper()
    return any(
        t.original_currency and t.original_currency.upper() != home
        for t in ctx.snapshot.transactions
    )


def _recurring(rule: RecurringRule, ctx: RuleContext) -> bool:
    return any(t.is_recurring for t in ctx.snapshot.transactions)


def _weekend_coverage(rule: WeekendCoverageRule, ctx: RuleContext) -> bool:
    weekdays = {t.date.weekday() for t in ctx.snapshot.transactions}
    return SATURDAY in weekdays and SUNDAY in weekdays


def _spend_gap(rule: SpendGapRule, ctx: RuleContext) -> bool:
    days = sorted(ctx.expense_days)
    return any(later - earlier > timedelta(days=1) for earlier, later in zip(days, days[1:]))


_EVALUATORS: Dict[Type, Callable[..., bool]] = {
    TransactionCountRule: _transaction_count,
    MonthlySavingsRule: _monthly_savings,
    StreakRule: _streak,
    ExistenceRule: _existence,
    UnderBudgetRule: _under_budget,
    CategoryKeywordRule: _category_keyword,
    CategoryAmountBelowRule: _category_amount_below,
    AmountAboveRule: _amount_above,
    TimeOfDayRule: _time_of_day,
    ForeignCurrencyRule: _foreign_currency,
    RecurringRule: _recurring,
    WeekendCoverageRule: _weekend_coverage,
    SpendGapRule: _spend_gap,
}


def evaluate_rule(rule: object, ctx: RuleContext) -> bool:
    evaluator = _EVALUATORS.get(type(rule))
    if evaluator is None:
        raise TypeError(f"unknown badge rule kind: {type(rule).__name__}")
    return bool(evaluator(rule, ctx))
