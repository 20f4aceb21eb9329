from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import BehaviorAnalysisContract
from backend.app.services import behavior_service

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/{user_id}/behavior", response_model=BehaviorAnalysisContract)
def analyze_behavior(user_id: str, db: Session = Depends(get_db)):
    return behavior_service.analyze_user_behavior(db, user_id)
