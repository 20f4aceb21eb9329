from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import BadgeContract, BadgeEvaluationContract
from backend.app.services import badge_service

router = APIRouter(prefix="/api/badges", tags=["badges"])


@router.get("/{user_id}", response_model=List[BadgeContract])
def list_badges(user_id: str, db: Session = Depends(get_db)):
    return badge_service.list_badges(db, user_id)


@router.post("/{user_id}/evaluate", response_model=BadgeEvaluationContract)
def evaluate_badges(user_id: str, db: Session = Depends(get_db)):
    new_unlocks = badge_service.evaluate_badges(db, user_id)
    return {"new_unlocks": new_unlocks, "count": len(new_unlocks)}
