from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from backend.app.models import Budget, Insight, Transaction
from backend.app.services import audit_service
from backend.app.services.insight_engine_service import serialize_insight
from backend.app.services.user_service import require_user


logger = logging.getLogger(__name__)

ALLOWED_ACTIONS = {"approve": "approved", "reject": "rejected"}


def list_pending_insights(db: Session, user_id: str) -> List[Dict[str, Any]]:
    require_user(db, user_id)
    rows = (
        db.execute(
            select(Insight)
            .where(Insight.user_id == user_id, Insight.status == "pending")
            .order_by(Insight.created_at.desc(), Insight.id.desc())
        )
        .scalars()
        .all()
    )
    return [serialize_insight(row) for row in rows]


def _mark_transactions_recurring(db: Session, user_id: str, data: Dict[str, Any]) -> int:
    result = db.execute(
        update(Transaction)
        .where(
            Transaction.user_id == user_id,
            Transaction.type == "expense",
            Transaction.description == data.get("description"),
            Transaction.amount == data.get("amount"),
        )
        .values(is_recurring=True, frequency=data.get("frequency") or "monthly")
    )
    return result.rowcount or 0


def _upsert_category_budget(db: Session, user_id: str, data: Dict[str, Any]) -> Budget:
    category = data.get("category")
    month = data.get("month")
    budget = db.execute(
        select(Budget).where(
            Budget.user_id == user_id,
            Budget.month == month,
            Budget.category == category,
        )
    ).scalar_one_or_none()
    if budget is None:
        budget = Budget(user_id=user_id, month=month, category=category, amount=data.get("newLimit"))
        db.add(budget)
    else:
        budget.amount = data.get("newLimit")
    db.flush()
    return budget


def _apply_insight(db: Session, insight: Insight) -> Optional[Dict[str, Any]]:
    data = insight.data or {}
    if insight.type == "recurring_transaction":
        updated = _mark_transactions_recurring(db, insight.user_id, data)
        return {"transactions_marked_recurring": updated}
    if insight.type == "budget_adjust":
        budget = _upsert_category_budget(db, insight.user_id, data)
        return {"budget_id": budget.id, "month": budget.month, "amount": budget.amount}
    return None


def review_insight(
    db: Session,
    user_id: str,
    insight_id: str,
    action: str,
    reason: Optional[str] = None,
    actor: Optional[str] = None,
) -> Dict[str, Any]:
    require_user(db, user_id)
    if action not in ALLOWED_ACTIONS:
        raise HTTPException(status_code=400, detail="invalid action")

    insight = db.get(Insight, insight_id)
    if not insight or insight.user_id != user_id:
        raise HTTPException(status_code=404, detail="insight not found")
    if insight.status != "pending":
        raise HTTPException(status_code=409, detail=f"insight already {insight.status}")

    before_state = serialize_insight(insight)
    effect = _apply_insight(db, insight) if action == "approve" else None

    insight.status = ALLOWED_ACTIONS[action]
    insight.open_key = None

    audit_row = audit_service.log_audit_event(
        db,
        user_id=user_id,
        event_type="insight_reviewed",
        actor=actor or "user",
        reason=reason or action,
        before=before_state,
        after=serialize_insight(insight),
        insight_id=insight.id,
    )
    db.commit()
    logger.info("[insights] user=%s insight=%s status=%s", user_id, insight.id, insight.status)

    return {
        "insight": serialize_insight(insight),
        "effect": effect,
        "audit_id": audit_row.id,
    }
