from __future__ import annotations

from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.domain.records import UserSnapshot, build_snapshot
from backend.app.models import Budget, SavingsGoal, Transaction, User


def require_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    return user


def load_snapshot(db: Session, user_id: str, *, txn_type: Optional[str] = None) -> UserSnapshot:
    txn_query = select(Transaction).where(Transaction.user_id == user_id)
    if txn_type:
        txn_query = txn_query.where(Transaction.type == txn_type)
    txns = db.execute(
        txn_query.order_by(Transaction.occurred_at.asc(), Transaction.id.asc())
    ).scalars().all()
    budgets = db.execute(
        select(Budget).where(Budget.user_id == user_id).order_by(Budget.created_at.asc(), Budget.id.asc())
    ).scalars().all()
    goals = db.execute(
        select(SavingsGoal).where(SavingsGoal.user_id == user_id)
    ).scalars().all()
    return build_snapshot(txns, budgets, goals)
