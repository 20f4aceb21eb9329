from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import EngineRunContract, InsightContract, InsightReviewIn
from backend.app.services import insight_engine_service, insight_review_service

router = APIRouter(prefix="/api/insights", tags=["insights"])


class InsightListOut(BaseModel):
    insights: List[InsightContract]
    meta: Dict[str, Any]


class InsightReviewOut(BaseModel):
    insight: InsightContract
    effect: Optional[Dict[str, Any]] = None
    audit_id: str


@router.post("/{user_id}/run", response_model=EngineRunContract)
def run_insight_engine(user_id: str, db: Session = Depends(get_db)):
    return insight_engine_service.run_insight_engine_payload(db, user_id)


@router.get("/{user_id}", response_model=InsightListOut)
def list_pending_insights(user_id: str, db: Session = Depends(get_db)):
    insights = insight_review_service.list_pending_insights(db, user_id)
    return {"insights": insights, "meta": {"count": len(insights)}}


@router.post("/{user_id}/{insight_id}/review", response_model=InsightReviewOut)
def review_insight(
    user_id: str,
    insight_id: str,
    req: InsightReviewIn,
    db: Session = Depends(get_db),
):
    return insight_review_service.review_insight(
        db,
        user_id,
        insight_id,
        action=req.action,
        reason=req.reason,
    )
