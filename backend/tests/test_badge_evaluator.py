from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from backend.app.badges import BadgeDefinition
from backend.app.badges.rules import TimeOfDayRule, TransactionCountRule
from backend.app.domain.records import TxnRecord, UserSnapshot
from backend.app.models import AuditLog, BadgeUnlock, Budget, Transaction, User
from backend.app.services import badge_service


NOW = datetime(2026, 3, 26, 12, 0)


@pytest.fixture()
def user(db_session):
    row = User(email="badges@example.com", name="Badge Test")
    db_session.add(row)
    db_session.commit()
    return row


def _txn(db_session, user, amount, at, *, type="expense", category=None):
    db_session.add(
        Transaction(user_id=user.id, type=type, amount=amount, occurred_at=at, category=category)
    )


def test_first_expense_unlocks_first_step(db_session, user):
    _txn(db_session, user, 120, NOW - timedelta(hours=1), category="Food")
    db_session.commit()

    new_unlocks = badge_service.evaluate_badges(db_session, user.id, now=NOW)

    assert "first_step" in new_unlocks
    assert "frugal_foodie" in new_unlocks
    assert "tracker_novice" not in new_unlocks
    audits = db_session.execute(
        select(AuditLog).where(AuditLog.user_id == user.id, AuditLog.event_type == "badge_unlocked")
    ).scalars().all()
    assert {row.badge_id for row in audits} == set(new_unlocks)


def test_evaluation_is_idempotent(db_session, user):
    _txn(db_session, user, 120, NOW - timedelta(hours=1))
    db_session.commit()

    first = badge_service.evaluate_badges(db_session, user.id, now=NOW)
    second = badge_service.evaluate_badges(db_session, user.id, now=NOW)

    assert first
    assert second == []
    rows = db_session.execute(select(BadgeUnlock).where(BadgeUnlock.user_id == user.id)).scalars().all()
    assert sorted(row.badge_id for row in rows) == sorted(first)


def test_unlocks_survive_when_condition_stops_holding(db_session, user):
    db_session.add(Budget(user_id=user.id, month="2026-03", amount=10000))
    _txn(db_session, user, 50000, NOW - timedelta(hours=2), type="income")
    db_session.commit()
    assert "saver_platinum" in badge_service.evaluate_badges(db_session, user.id, now=NOW)

    _txn(db_session, user, 45000, NOW - timedelta(hours=1))
    db_session.commit()
    badge_service.evaluate_badges(db_session, user.id, now=NOW)

    badges = {badge["id"]: badge for badge in badge_service.list_badges(db_session, user.id)}
    assert badges["saver_platinum"]["unlocked"] is True
    assert badges["big_spender"]["unlocked"] is True
    assert badges["under_budget"]["unlocked"] is True


def test_list_badges_reports_full_catalog(db_session, user):
    badges = badge_service.list_badges(db_session, user.id)

    assert len(badges) == 26
    assert badges[0]["id"] == "first_step"
    assert not any(badge["unlocked"] for badge in badges)


def test_failing_rule_does_not_block_others():
    catalog = (
        BadgeDefinition("broken", "Broken", "Misconfigured.", "x", "general", TimeOfDayRule()),
        BadgeDefinition("first_step", "First Step", "Add one.", "y", "general", TransactionCountRule(min_count=1)),
    )
    snapshot = UserSnapshot(
        transactions=(TxnRecord(id="t1", type="expense", amount=5, occurred_at=NOW),),
    )

    qualified = badge_service.qualifying_badges(snapshot, NOW, catalog=catalog)

    assert qualified == ["first_step"]


def test_qualifying_badges_skips_already_unlocked():
    snapshot = UserSnapshot(
        transactions=(TxnRecord(id="t1", type="expense", amount=5, occurred_at=NOW),),
    )
    qualified = badge_service.qualifying_badges(snapshot, NOW, already_unlocked={"first_step"})
    assert "first_step" not in qualified


def test_duplicate_unlock_rejected_by_store(db_session, user):
    db_session.add(BadgeUnlock(user_id=user.id, badge_id="first_step", unlocked_at=NOW))
    db_session.commit()

    db_session.add(BadgeUnlock(user_id=user.id, badge_id="first_step", unlocked_at=NOW))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_evaluate_missing_user_is_404(db_session):
    with pytest.raises(HTTPException) as excinfo:
        badge_service.evaluate_badges(db_session, "missing-user", now=NOW)
    assert excinfo.value.status_code == 404


def test_rolled_back_unlock_leaves_nothing_behind(db_session, user):
    from backend.app.db import SessionLocal

    assert badge_service._insert_unlock(db_session, user.id, "first_step", NOW) is True
    db_session.rollback()

    fresh = SessionLocal()
    try:
        rows = fresh.execute(select(BadgeUnlock).where(BadgeUnlock.user_id == user.id)).scalars().all()
        assert rows == []
    finally:
        fresh.close()
