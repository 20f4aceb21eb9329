from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Tuple

InsightType = Literal["alert", "recurring_transaction", "budget_adjust"]
Confidence = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class InsightDraft:
    type: InsightType
    discriminator: str
    title: str
    message: str
    data: Dict[str, Any]
    confidence: Confidence


@dataclass(frozen=True)
class DetectorDefinition:
    detector_id: str
    insight_type: InsightType
    blocking_statuses: Tuple[str, ...]


@dataclass(frozen=True)
class EngineRunSummary:
    user_id: str
    success: bool
    created: Dict[str, List[str]] = field(default_factory=dict)
