from .behavior import BehaviorFinding, BehaviorReport, analyze_behavior
from .detectors import (
    BUDGET_ADJUST,
    DETECTOR_ORDER,
    OVERSPEND,
    RECURRING,
    detect_budget_adjustments,
    detect_overspend,
    detect_recurring,
)
from .schema import DetectorDefinition, EngineRunSummary, InsightDraft

__all__ = [
    "BehaviorFinding",
    "BehaviorReport",
    "BUDGET_ADJUST",
    "DETECTOR_ORDER",
    "OVERSPEND",
    "RECURRING",
    "DetectorDefinition",
    "EngineRunSummary",
    "InsightDraft",
    "analyze_behavior",
    "detect_budget_adjustments",
    "detect_overspend",
    "detect_recurring",
]
