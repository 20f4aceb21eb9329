from datetime import datetime

from backend.app.domain.records import BudgetRecord, TxnRecord
from backend.app.insights import (
    detect_budget_adjustments,
    detect_overspend,
    detect_recurring,
)
from backend.app.insights.detectors import group_prior_month_merchants


NOW = datetime(2026, 3, 26, 12, 0)


def _expense(amount, at, *, description=None, category=None, is_recurring=False):
    return TxnRecord(
        id=None,
        type="expense",
        amount=amount,
        occurred_at=at,
        description=description,
        category=category,
        is_recurring=is_recurring,
    )


# -------------------------
# Overspend
# -------------------------

def test_overspend_fires_at_ninety_percent():
    budgets = [BudgetRecord(id="b1", month="2026-03", amount=1000, category="Food")]
    txns = [
        _expense(600, datetime(2026, 3, 3), category="Food"),
        _expense(350, datetime(2026, 3, 20), category="Food"),
        _expense(5000, datetime(2026, 3, 20), category="Rent"),
    ]

    drafts = detect_overspend(txns, budgets, now=NOW)

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.type == "alert"
    assert draft.discriminator == "Food"
    assert draft.title == "Approaching Budget Limit: Food"
    assert draft.message == "You have spent 95% of your Food budget."
    assert draft.data == {"category": "Food", "limit": 1000, "current": 950}
    assert draft.confidence == "high"


def test_overspend_quiet_below_threshold_and_outside_month():
    budgets = [BudgetRecord(id="b1", month="2026-03", amount=1000, category="Food")]
    txns = [
        _expense(899, datetime(2026, 3, 3), category="Food"),
        _expense(900, datetime(2026, 2, 27), category="Food"),
    ]
    assert detect_overspend(txns, budgets, now=NOW) == []


def test_overspend_ignores_budgets_for_other_months():
    budgets = [BudgetRecord(id="b1", month="2026-02", amount=100, category="Food")]
    txns = [_expense(500, datetime(2026, 3, 3), category="Food")]
    assert detect_overspend(txns, budgets, now=NOW) == []


def test_overspend_whole_month_budget_counts_every_expense():
    budgets = [BudgetRecord(id="b1", month="2026-03", amount=1000)]
    txns = [
        _expense(500, datetime(2026, 3, 3), category="Food"),
        _expense(500, datetime(2026, 3, 4)),
    ]

    drafts = detect_overspend(txns, budgets, now=NOW)

    assert [d.discriminator for d in drafts] == ["*"]
    assert drafts[0].title == "Approaching Budget Limit: Overall"
    assert drafts[0].message == "You have spent 100% of your Overall budget."


def test_overspend_skips_non_positive_budgets():
    budgets = [BudgetRecord(id="b1", month="2026-03", amount=0, category="Food")]
    txns = [_expense(10, datetime(2026, 3, 3), category="Food")]
    assert detect_overspend(txns, budgets, now=NOW) == []


# -------------------------
# Recurring
# -------------------------

def test_recurring_needs_three_matching_charges():
    txns = [
        _expense(499, datetime(2026, 1, 5), description="Netflix", category="Entertainment"),
        _expense(499, datetime(2026, 2, 5), description="netflix ", category="Entertainment"),
        _expense(499, datetime(2026, 3, 5), description="NETFLIX", category="Entertainment"),
    ]

    drafts = detect_recurring(txns, now=NOW, currency="₹")

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.type == "recurring_transaction"
    assert draft.discriminator == "Netflix"
    assert draft.title == "Recurring Expense Detected: Netflix"
    assert draft.message == (
        "You've spent ₹499 on \"Netflix\" 3 times recently. Should I mark this as recurring?"
    )
    assert draft.data == {
        "description": "Netflix",
        "amount": 499,
        "category": "Entertainment",
        "frequency": "monthly",
    }


def test_recurring_quiet_with_two_charges_or_different_amounts():
    two = [
        _expense(499, datetime(2026, 2, 5), description="Netflix"),
        _expense(499, datetime(2026, 3, 5), description="Netflix"),
    ]
    assert detect_recurring(two, now=NOW) == []

    mixed = two + [_expense(649, datetime(2026, 1, 5), description="Netflix")]
    assert detect_recurring(mixed, now=NOW) == []


def test_recurring_respects_lookback_and_flagged_rows():
    txns = [
        _expense(499, datetime(2025, 12, 20), description="Netflix"),
        _expense(499, datetime(2026, 2, 5), description="Netflix"),
        _expense(499, datetime(2026, 3, 5), description="Netflix"),
        _expense(499, datetime(2026, 3, 6), description="Netflix", is_recurring=True),
    ]
    assert detect_recurring(txns, now=NOW) == []


def test_recurring_skips_blank_descriptions():
    txns = [_expense(10, datetime(2026, 3, d), description="  ") for d in (1, 2, 3)]
    assert detect_recurring(txns, now=NOW) == []


# -------------------------
# Habitual merchants
# -------------------------

def test_budget_adjust_proposes_ten_percent_cut():
    txns = [
        _expense(500, datetime(2026, 2, day), description="Zomato", category="Food")
        for day in (2, 9, 16, 23)
    ]

    drafts = detect_budget_adjustments(txns, now=NOW, currency="₹")

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.type == "budget_adjust"
    assert draft.discriminator == "Food"
    assert draft.title == "Spending Habit Detected: Zomato"
    assert draft.data == {"category": "Food", "newLimit": 1800, "month": "2026-03", "merchant": "Zomato"}
    assert draft.confidence == "medium"
    assert "₹2000" in draft.message
    assert "₹1800" in draft.message


def test_budget_adjust_only_counts_previous_month():
    txns = [
        _expense(500, datetime(2026, 2, 2), description="Zomato", category="Food"),
        _expense(500, datetime(2026, 2, 9), description="Zomato", category="Food"),
        _expense(500, datetime(2026, 2, 16), description="Zomato", category="Food"),
        _expense(500, datetime(2026, 3, 2), description="Zomato", category="Food"),
    ]
    assert detect_budget_adjustments(txns, now=NOW) == []


def test_budget_adjust_skips_groups_without_category():
    txns = [_expense(100, datetime(2026, 2, day), description="Corner Shop") for day in (1, 2, 3, 4)]
    assert detect_budget_adjustments(txns, now=NOW) == []


def test_merchant_group_takes_first_non_empty_category():
    txns = [
        _expense(100, datetime(2026, 2, 1), description="Cafe"),
        _expense(100, datetime(2026, 2, 2), description="Cafe", category="Coffee"),
        _expense(100, datetime(2026, 2, 3), description="Cafe", category="Snacks"),
    ]

    [group] = group_prior_month_merchants(txns, now=NOW)

    assert group.count == 3
    assert group.total == 300
    assert group.category == "Coffee"
