from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


InsightTypeLiteral = Literal["alert", "recurring_transaction", "budget_adjust"]
InsightStatusLiteral = Literal["pending", "approved", "rejected"]
ConfidenceLiteral = Literal["low", "medium", "high"]


class InsightContract(BaseModel):
    id: str
    user_id: str
    type: InsightTypeLiteral
    title: str
    message: str
    data: Dict[str, Any]
    confidence: ConfidenceLiteral
    status: InsightStatusLiteral
    created_at: Optional[datetime] = None


class InsightReviewIn(BaseModel):
    action: Literal["approve", "reject"]
    reason: Optional[str] = Field(default=None, max_length=200)


class EngineRunContract(BaseModel):
    user_id: str
    success: bool
    created: Dict[str, List[str]]


class BadgeContract(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    category: str
    unlocked: bool
    unlocked_at: Optional[datetime] = None


class BadgeEvaluationContract(BaseModel):
    new_unlocks: List[str]
    count: int


class BehaviorFindingContract(BaseModel):
    type: Literal["time", "weekend", "impulse"]
    title: str
    message: str
    data: Dict[str, Any]


class BehaviorReportContract(BaseModel):
    time_buckets: Dict[str, float]
    weekend_total: float
    weekday_total: float
    impulse_count: int
    findings: List[BehaviorFindingContract]


class BehaviorAnalysisContract(BaseModel):
    user_id: str
    report: Optional[BehaviorReportContract] = None
