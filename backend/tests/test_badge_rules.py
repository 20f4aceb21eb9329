from datetime import datetime, timedelta

import pytest

from backend.app.badges import BADGES, BADGES_BY_ID, RuleContext, evaluate_rule
from backend.app.badges.rules import (
    CategoryKeywordRule,
    ForeignCurrencyRule,
    MonthlySavingsRule,
    SpendGapRule,
    TimeOfDayRule,
    UnderBudgetRule,
    WeekendCoverageRule,
)
from backend.app.domain.records import BudgetRecord, GoalRecord, TxnRecord, UserSnapshot


NOW = datetime(2026, 3, 26, 12, 0)


def _txn(amount, *, type="expense", at=NOW, category=None, **extra):
    return TxnRecord(id=None, type=type, amount=amount, occurred_at=at, category=category, **extra)


def _ctx(txns=(), budgets=(), goals=(), now=NOW):
    return RuleContext(
        snapshot=UserSnapshot(transactions=tuple(txns), budgets=tuple(budgets), goals=tuple(goals)),
        now=now,
    )


def _badge(badge_id, ctx):
    return evaluate_rule(BADGES_BY_ID[badge_id].rule, ctx)


def test_catalog_ids_are_unique_and_ordered():
    ids = [badge.id for badge in BADGES]
    assert len(ids) == len(set(ids))
    assert ids[:4] == ["first_step", "tracker_novice", "tracker_pro", "tracker_master"]
    assert ids[-1] == "subscriber"


def test_transaction_count_thresholds():
    ctx = _ctx([_txn(1) for _ in range(10)])
    assert _badge("first_step", ctx)
    assert _badge("tracker_novice", ctx)
    assert not _badge("tracker_pro", ctx)


def test_savings_tier_boundary_exact_threshold_unlocks():
    exact = _ctx([_txn(3000, type="income"), _txn(2000)])
    short = _ctx([_txn(2999, type="income"), _txn(2000)])

    assert _badge("saver_bronze", exact)
    assert not _badge("saver_bronze", short)
    assert not _badge("saver_silver", exact)


def test_savings_ignore_other_months():
    last_month = NOW - timedelta(days=40)
    ctx = _ctx([_txn(50000, type="income", at=last_month)])
    assert not evaluate_rule(MonthlySavingsRule(min_savings=1000), ctx)


def test_streak_badges_wrap_calculator():
    txns = [_txn(5, at=NOW - timedelta(days=n)) for n in range(1, 8)]
    ctx = _ctx(txns)
    assert _badge("streak_3", ctx)
    assert _badge("streak_7", ctx)
    assert not _badge("streak_14", ctx)


def test_existence_rules_for_budgets_and_goals():
    ctx = _ctx(budgets=[BudgetRecord(id=None, month="2026-03", amount=100)])
    assert _badge("budget_setter", ctx)
    assert not _badge("goal_setter", ctx)

    ctx = _ctx(goals=[GoalRecord(id=None, name="Trip", target_amount=5000)])
    assert _badge("goal_setter", ctx)


def test_under_budget_only_from_the_25th():
    budget = BudgetRecord(id=None, month="2026-03", amount=1000)
    txns = [_txn(400)]
    assert evaluate_rule(UnderBudgetRule(from_day=25), _ctx(txns, [budget]))

    early = datetime(2026, 3, 24, 12, 0)
    assert not evaluate_rule(UnderBudgetRule(from_day=25), _ctx([_txn(400, at=early)], [budget], now=early))


def test_under_budget_needs_whole_budget_and_spend_within_it():
    category_budget = BudgetRecord(id=None, month="2026-03", amount=1000, category="Food")
    assert not _badge("under_budget", _ctx([_txn(10)], [category_budget]))

    whole = BudgetRecord(id=None, month="2026-03", amount=1000)
    assert _badge("under_budget", _ctx([_txn(1000)], [whole]))
    assert not _badge("under_budget", _ctx([_txn(1000.01)], [whole]))


def test_spending_pattern_rules():
    ctx = _ctx([_txn(150, category="Food"), _txn(12000, category="Rent")])
    assert _badge("frugal_foodie", ctx)
    assert _badge("big_spender", ctx)

    ctx = _ctx([_txn(10000, category="Food")])
    assert not _badge("frugal_foodie", ctx)
    assert not _badge("big_spender", ctx)


def test_category_keyword_count_is_case_insensitive():
    rule = CategoryKeywordRule(keywords=frozenset({"gym", "fitness"}), min_count=3)
    ctx = _ctx([_txn(1, category="Gym"), _txn(1, category="FITNESS"), _txn(1, category="gym")])
    assert evaluate_rule(rule, ctx)
    assert not evaluate_rule(rule, _ctx([_txn(1, category="Gym"), _txn(1, category=None)]))


def test_time_of_day_thresholds():
    early = _ctx([_txn(1, at=NOW.replace(hour=7, minute=59))])
    late = _ctx([_txn(1, at=NOW.replace(hour=22, minute=0))])
    midday = _ctx([_txn(1, at=NOW.replace(hour=21, minute=59))])

    assert _badge("early_bird", early)
    assert not _badge("early_bird", midday)
    assert _badge("night_owl", late)
    assert not _badge("night_owl", midday)


def test_time_of_day_without_bounds_is_a_configuration_error():
    with pytest.raises(ValueError):
        evaluate_rule(TimeOfDayRule(), _ctx([_txn(1)]))


def test_weekend_coverage_needs_saturday_and_sunday():
    saturday = datetime(2026, 3, 21, 10, 0)
    sunday = datetime(2026, 3, 22, 10, 0)
    assert evaluate_rule(WeekendCoverageRule(), _ctx([_txn(1, at=saturday), _txn(1, at=sunday)]))
    assert not evaluate_rule(WeekendCoverageRule(), _ctx([_txn(1, at=saturday)]))


def test_spend_gap_detects_an_empty_day_between_expenses():
    gap = _ctx([_txn(1, at=NOW - timedelta(days=2)), _txn(1, at=NOW)])
    contiguous = _ctx([_txn(1, at=NOW - timedelta(days=1)), _txn(1, at=NOW)])
    assert evaluate_rule(SpendGapRule(), gap)
    assert not evaluate_rule(SpendGapRule(), contiguous)
    assert not evaluate_rule(SpendGapRule(), _ctx([_txn(1)]))


def test_foreign_currency_and_recurring():
    rule = ForeignCurrencyRule(home_currency="INR")
    assert evaluate_rule(rule, _ctx([_txn(1, original_currency="usd")]))
    assert not evaluate_rule(rule, _ctx([_txn(1, original_currency="INR"), _txn(1)]))

    assert _badge("subscriber", _ctx([_txn(1, is_recurring=True)]))
    assert not _badge("subscriber", _ctx([_txn(1)]))


def test_unknown_rule_kind_raises():
    class Mystery:
        pass

    with pytest.raises(TypeError):
        evaluate_rule(Mystery(), _ctx())
