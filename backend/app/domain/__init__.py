"""Domain contracts and shared types."""

from backend.app.domain.contracts import (  # noqa: F401
    BadgeContract,
    BadgeEvaluationContract,
    BehaviorAnalysisContract,
    EngineRunContract,
    InsightContract,
    InsightReviewIn,
)
from backend.app.domain.records import (  # noqa: F401
    BudgetRecord,
    GoalRecord,
    TxnRecord,
    UserSnapshot,
    build_snapshot,
)
