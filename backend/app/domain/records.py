"""
Immutable views of a user's stored records.

Detectors and badge rules only ever see these, never ORM rows, so both
stay pure and can be exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class TxnRecord:
    id: Optional[str]
    type: str
    amount: float
    occurred_at: datetime
    description: Optional[str] = None
    category: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[str] = None
    original_currency: Optional[str] = None

    @property
    def date(self) -> date:
        return self.occurred_at.date()

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    @property
    def is_income(self) -> bool:
        return self.type == "income"


@dataclass(frozen=True)
class BudgetRecord:
    id: Optional[str]
    month: str
    amount: float
    category: Optional[str] = None


@dataclass(frozen=True)
class GoalRecord:
    id: Optional[str]
    name: str
    target_amount: float


@dataclass(frozen=True)
class UserSnapshot:
    transactions: Tuple[TxnRecord, ...] = field(default_factory=tuple)
    budgets: Tuple[BudgetRecord, ...] = field(default_factory=tuple)
    goals: Tuple[GoalRecord, ...] = field(default_factory=tuple)


def txn_record(row) -> TxnRecord:
    return TxnRecord(
        id=row.id,
        type=row.type,
        amount=float(row.amount or 0.0),
        occurred_at=row.occurred_at,
        description=row.description,
        category=row.category,
        is_recurring=bool(row.is_recurring),
        frequency=row.frequency,
        original_currency=row.original_currency,
    )


def budget_record(row) -> BudgetRecord:
    return BudgetRecord(
        id=row.id,
        month=row.month,
        amount=float(row.amount or 0.0),
        category=row.category,
    )


def goal_record(row) -> GoalRecord:
    return GoalRecord(id=row.id, name=row.name, target_amount=float(row.target_amount or 0.0))


def build_snapshot(transactions: Iterable, budgets: Iterable, goals: Iterable = ()) -> UserSnapshot:
    return UserSnapshot(
        transactions=tuple(txn_record(row) for row in transactions),
        budgets=tuple(budget_record(row) for row in budgets),
        goals=tuple(goal_record(row) for row in goals),
    )
