from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.badges import BADGES, BadgeDefinition, RuleContext, evaluate_rule
from backend.app.config import local_now
from backend.app.domain.records import UserSnapshot
from backend.app.models import BadgeUnlock
from backend.app.services import audit_service
from backend.app.services.user_service import load_snapshot, require_user


logger = logging.getLogger(__name__)


def unlocked_badge_ids(db: Session, user_id: str) -> Set[str]:
    return set(
        db.execute(select(BadgeUnlock.badge_id).where(BadgeUnlock.user_id == user_id)).scalars().all()
    )


def qualifying_badges(
    snapshot: UserSnapshot,
    now: datetime,
    *,
    already_unlocked: Iterable[str] = (),
    catalog: Iterable[BadgeDefinition] = BADGES,
) -> List[str]:
    """
    Badge ids whose rule holds for the snapshot, skipping ones already
    unlocked. A rule that raises is logged and treated as not qualifying
    for this run; the remaining rules are still evaluated.
    """
    skip = set(already_unlocked)
    ctx = RuleContext(snapshot=snapshot, now=now)
    qualified: List[str] = []
    for badge in catalog:
        if badge.id in skip:
            continue
        try:
            if evaluate_rule(badge.rule, ctx):
                qualified.append(badge.id)
        except Exception:
            logger.exception("[badges] rule evaluation failed badge=%s", badge.id)
    return qualified


def _insert_unlock(db: Session, user_id: str, badge_id: str, unlocked_at: datetime) -> bool:
    try:
        with db.begin_nested():
            db.add(BadgeUnlock(user_id=user_id, badge_id=badge_id, unlocked_at=unlocked_at))
            db.flush()
    except IntegrityError:
        logger.warning("[badges] unlock already recorded user=%s badge=%s", user_id, badge_id)
        return False
    return True


def evaluate_badges(db: Session, user_id: str, now: Optional[datetime] = None) -> List[str]:
    require_user(db, user_id)
    at = local_now(now)

    snapshot = load_snapshot(db, user_id)
    already = unlocked_badge_ids(db, user_id)
    qualified = qualifying_badges(snapshot, at, already_unlocked=already)

    new_unlocks: List[str] = []
    for badge_id in qualified:
        if _insert_unlock(db, user_id, badge_id, at):
            new_unlocks.append(badge_id)
            audit_service.log_audit_event(
                db,
                user_id=user_id,
                event_type="badge_unlocked",
                actor="system",
                after={"badge_id": badge_id, "unlocked_at": at.isoformat()},
                badge_id=badge_id,
            )
    db.commit()

    if new_unlocks:
        logger.info("[badges] user=%s unlocked=%s", user_id, ",".join(new_unlocks))
    return new_unlocks


def list_badges(db: Session, user_id: str) -> List[Dict[str, Any]]:
    require_user(db, user_id)
    unlocks = {
        row.badge_id: row.unlocked_at
        for row in db.execute(select(BadgeUnlock).where(BadgeUnlock.user_id == user_id)).scalars().all()
    }
    return [
        {
            "id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "category": badge.category,
            "unlocked": badge.id in unlocks,
            "unlocked_at": unlocks.get(badge.id),
        }
        for badge in BADGES
    ]
