from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.models import AuditLog
from backend.app.services.user_service import require_user


def log_audit_event(
    db: Session,
    *,
    user_id: str,
    event_type: str,
    actor: str,
    reason: Optional[str] = None,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    insight_id: Optional[str] = None,
    badge_id: Optional[str] = None,
) -> AuditLog:
    """Append one row; flushed but not committed, the caller owns the transaction."""
    row = AuditLog(
        user_id=user_id,
        event_type=event_type,
        actor=actor,
        reason=reason,
        before_state=before,
        after_state=after,
        insight_id=insight_id,
        badge_id=badge_id,
    )
    db.add(row)
    db.flush()
    return row


def serialize_audit_event(row: AuditLog) -> Dict[str, Any]:
    return {
        "id": row.id,
        "event_type": row.event_type,
        "actor": row.actor,
        "reason": row.reason,
        "insight_id": row.insight_id,
        "badge_id": row.badge_id,
        "before_state": row.before_state,
        "after_state": row.after_state,
        "created_at": row.created_at,
    }


def list_audit_events(
    db: Session,
    user_id: str,
    *,
    event_type: Optional[str] = None,
    insight_id: Optional[str] = None,
    badge_id: Optional[str] = None,
    limit: int = 100,
) -> List[Dict[str, Any]]:
    """
    Newest-first engine history for a user. Filtering on insight_id gives
    the lifecycle of a single insight (created, then reviewed).
    """
    require_user(db, user_id)

    query = select(AuditLog).where(AuditLog.user_id == user_id)
    if event_type:
        query = query.where(AuditLog.event_type == event_type)
    if insight_id:
        query = query.where(AuditLog.insight_id == insight_id)
    if badge_id:
        query = query.where(AuditLog.badge_id == badge_id)

    rows = db.execute(
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    ).scalars().all()
    return [serialize_audit_event(row) for row in rows]
