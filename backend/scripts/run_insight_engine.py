from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db import session_scope
from backend.app.models import User
from backend.app.services import badge_service, insight_engine_service


logger = logging.getLogger("backend.scripts.run_insight_engine")


def _user_ids(db: Session, user_id: Optional[str]) -> List[str]:
    if user_id:
        return [user_id]
    return list(db.execute(select(User.id).order_by(User.created_at.asc())).scalars().all())


def run(db: Session, user_id: Optional[str] = None, *, badges: bool = False) -> List[dict]:
    results = []
    for uid in _user_ids(db, user_id):
        summary = insight_engine_service.run_insight_engine_payload(db, uid)
        if badges:
            summary["new_badges"] = badge_service.evaluate_badges(db, uid)
        results.append(summary)
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run insight detection (and optionally badges) on demand.")
    parser.add_argument("--user-id", help="Only run for this user; defaults to every user.")
    parser.add_argument("--badges", action="store_true", help="Also evaluate badge unlocks.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default INFO).")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    with session_scope() as db:
        results = run(db, args.user_id, badges=args.badges)

    logger.info("processed users=%s", len(results))
    print(json.dumps(results, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
