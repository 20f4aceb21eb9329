from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from backend.app.config import local_now
from backend.app.insights import analyze_behavior
from backend.app.services.user_service import load_snapshot, require_user


logger = logging.getLogger(__name__)


def analyze_user_behavior(db: Session, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    require_user(db, user_id)
    snapshot = load_snapshot(db, user_id, txn_type="expense")
    report = analyze_behavior(snapshot.transactions, now=local_now(now))
    if report is None:
        logger.info("[behavior] user=%s no expenses in window", user_id)
        return {"user_id": user_id, "report": None}

    logger.info(
        "[behavior] user=%s findings=%s impulse_count=%s",
        user_id,
        ",".join(f.type for f in report.findings) or "-",
        report.impulse_count,
    )
    return {"user_id": user_id, "report": asdict(report)}
