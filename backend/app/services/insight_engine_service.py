from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.config import currency_symbol, local_now
from backend.app.domain.records import UserSnapshot
from backend.app.insights import (
    BUDGET_ADJUST,
    DETECTOR_ORDER,
    OVERSPEND,
    RECURRING,
    DetectorDefinition,
    EngineRunSummary,
    InsightDraft,
    detect_budget_adjustments,
    detect_overspend,
    detect_recurring,
)
from backend.app.models import Insight
from backend.app.services import audit_service
from backend.app.services.user_service import load_snapshot, require_user


logger = logging.getLogger(__name__)


def serialize_insight(row: Insight) -> Dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "type": row.type,
        "title": row.title,
        "message": row.message,
        "data": row.data,
        "confidence": row.confidence,
        "status": row.status,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


def find_blocking_insight(
    db: Session,
    user_id: str,
    definition: DetectorDefinition,
    discriminator: str,
) -> Optional[str]:
    return db.execute(
        select(Insight.id)
        .where(
            Insight.user_id == user_id,
            Insight.type == definition.insight_type,
            Insight.discriminator == discriminator,
            Insight.status.in_(definition.blocking_statuses),
        )
        .limit(1)
    ).scalar_one_or_none()


def insert_pending_insight(db: Session, user_id: str, draft: InsightDraft) -> Optional[Insight]:
    """
    Insert inside a savepoint. A concurrent run that already holds the
    pending slot for (user, type, discriminator) trips the unique constraint;
    that insert is dropped and None returned.
    """
    row = Insight(
        user_id=user_id,
        type=draft.type,
        title=draft.title,
        message=draft.message,
        data=dict(draft.data),
        confidence=draft.confidence,
        status="pending",
        discriminator=draft.discriminator,
        open_key=draft.discriminator,
    )
    try:
        with db.begin_nested():
            db.add(row)
            db.flush()
    except IntegrityError:
        logger.warning(
            "[insights] duplicate pending insight skipped user=%s type=%s key=%s",
            user_id,
            draft.type,
            draft.discriminator,
        )
        return None

    audit_service.log_audit_event(
        db,
        user_id=user_id,
        event_type="insight_created",
        actor="system",
        reason=draft.type,
        before=None,
        after=serialize_insight(row),
        insight_id=row.id,
    )
    return row


def _persist_drafts(
    db: Session,
    user_id: str,
    definition: DetectorDefinition,
    drafts: List[InsightDraft],
) -> List[str]:
    created: List[str] = []
    for draft in drafts:
        if find_blocking_insight(db, user_id, definition, draft.discriminator):
            continue
        row = insert_pending_insight(db, user_id, draft)
        if row is not None:
            created.append(row.id)
    db.commit()
    logger.info(
        "[insights] detector=%s user=%s candidates=%s created=%s",
        definition.detector_id,
        user_id,
        len(drafts),
        len(created),
    )
    return created


def _run_detector(
    db: Session,
    user_id: str,
    definition: DetectorDefinition,
    build: Callable[[UserSnapshot, datetime], List[InsightDraft]],
    now: Optional[datetime],
) -> List[str]:
    require_user(db, user_id)
    snapshot = load_snapshot(db, user_id, txn_type="expense")
    drafts = build(snapshot, local_now(now))
    return _persist_drafts(db, user_id, definition, drafts)


def run_overspend_detector(db: Session, user_id: str, now: Optional[datetime] = None) -> List[str]:
    return _run_detector(
        db,
        user_id,
        OVERSPEND,
        lambda snapshot, at: detect_overspend(snapshot.transactions, snapshot.budgets, now=at),
        now,
    )


def run_recurring_detector(db: Session, user_id: str, now: Optional[datetime] = None) -> List[str]:
    return _run_detector(
        db,
        user_id,
        RECURRING,
        lambda snapshot, at: detect_recurring(snapshot.transactions, now=at, currency=currency_symbol()),
        now,
    )


def run_budget_adjust_detector(db: Session, user_id: str, now: Optional[datetime] = None) -> List[str]:
    return _run_detector(
        db,
        user_id,
        BUDGET_ADJUST,
        lambda snapshot, at: detect_budget_adjustments(snapshot.transactions, now=at, currency=currency_symbol()),
        now,
    )


_RUNNERS: Dict[str, Callable[..., List[str]]] = {
    OVERSPEND.detector_id: run_overspend_detector,
    RECURRING.detector_id: run_recurring_detector,
    BUDGET_ADJUST.detector_id: run_budget_adjust_detector,
}


def run_insight_engine(db: Session, user_id: str, now: Optional[datetime] = None) -> EngineRunSummary:
    """
    Run overspend, recurring and budget-adjust detection for one user, in
    that order. Each detector commits its own inserts; a failure aborts the
    run and propagates.
    """
    require_user(db, user_id)
    at = local_now(now)
    logger.info("[insights] running for user=%s", user_id)

    created: Dict[str, List[str]] = {}
    for definition in DETECTOR_ORDER:
        created[definition.detector_id] = _RUNNERS[definition.detector_id](db, user_id, at)

    logger.info("[insights] finished run for user=%s", user_id)
    return EngineRunSummary(user_id=user_id, success=True, created=created)


def run_insight_engine_payload(db: Session, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    return asdict(run_insight_engine(db, user_id, now))
