from .catalog import BADGES, BADGES_BY_ID, BadgeDefinition
from .rules import RuleContext, evaluate_rule
from .streak import compute_streak, expense_day_set

__all__ = [
    "BADGES",
    "BADGES_BY_ID",
    "BadgeDefinition",
    "RuleContext",
    "compute_streak",
    "evaluate_rule",
    "expense_day_set",
]
