from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.services import audit_service

router = APIRouter(prefix="/api/audit", tags=["audit"])

EventTypeLiteral = Literal["insight_created", "insight_reviewed", "badge_unlocked"]


class AuditEventOut(BaseModel):
    id: str
    event_type: EventTypeLiteral
    actor: str
    reason: Optional[str] = None
    insight_id: Optional[str] = None
    badge_id: Optional[str] = None
    before_state: Optional[Dict[str, Any]] = None
    after_state: Optional[Dict[str, Any]] = None
    created_at: datetime


class AuditFeedOut(BaseModel):
    user_id: str
    items: List[AuditEventOut]


@router.get("/{user_id}", response_model=AuditFeedOut)
def list_audit_events(
    user_id: str,
    event_type: Optional[EventTypeLiteral] = Query(None),
    insight_id: Optional[str] = Query(None),
    badge_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    items = audit_service.list_audit_events(
        db,
        user_id,
        event_type=event_type,
        insight_id=insight_id,
        badge_id=badge_id,
        limit=limit,
    )
    return {"user_id": user_id, "items": items}
