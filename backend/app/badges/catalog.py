from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple

from backend.app.config import home_currency

from .rules import (
    AmountAboveRule,
    CategoryAmountBelowRule,
    CategoryKeywordRule,
    ExistenceRule,
    ForeignCurrencyRule,
    MonthlySavingsRule,
    RecurringRule,
    SpendGapRule,
    StreakRule,
    TimeOfDayRule,
    TransactionCountRule,
    UnderBudgetRule,
    WeekendCoverageRule,
)

BadgeCategory = Literal["general", "savings", "streak", "budget", "spending"]


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    rule: object


def _keywords(*words: str) -> frozenset:
    return frozenset(words)


BADGES: Tuple[BadgeDefinition, ...] = (
    # General / onboarding
    BadgeDefinition("first_step", "First Step", "Add your first transaction.", "👣", "general",
                    TransactionCountRule(min_count=1)),
    BadgeDefinition("tracker_novice", "Tracker Novice", "Track 10 transactions.", "📝", "general",
                    TransactionCountRule(min_count=10)),
    BadgeDefinition("tracker_pro", "Tracker Pro", "Track 50 transactions.", "📊", "general",
                    TransactionCountRule(min_count=50)),
    BadgeDefinition("tracker_master", "Tracker Master", "Track 100 transactions.", "🏆", "general",
                    TransactionCountRule(min_count=100)),

    # Savings (income - expense, current month)
    BadgeDefinition("saver_bronze", "Bronze Saver", "Save 1,000 in a month (Income - Expense).", "🥉", "savings",
                    MonthlySavingsRule(min_savings=1000)),
    BadgeDefinition("saver_silver", "Silver Saver", "Save 5,000 in a month.", "🥈", "savings",
                    MonthlySavingsRule(min_savings=5000)),
    BadgeDefinition("saver_gold", "Gold Saver", "Save 10,000 in a month.", "🥇", "savings",
                    MonthlySavingsRule(min_savings=10000)),
    BadgeDefinition("saver_platinum", "Platinum Saver", "Save 50,000 in a month.", "💎", "savings",
                    MonthlySavingsRule(min_savings=50000)),

    # Streaks
    BadgeDefinition("streak_3", "Consistency Is Key", "Track expenses for 3 days in a row.", "🔥", "streak",
                    StreakRule(min_days=3)),
    BadgeDefinition("streak_7", "Week Warrior", "Track expenses for 7 days in a row.", "🗓️", "streak",
                    StreakRule(min_days=7)),
    BadgeDefinition("streak_14", "Two Week Streak", "Track expenses for 14 days in a row.", "🚀", "streak",
                    StreakRule(min_days=14)),
    BadgeDefinition("streak_30", "Monthly Master", "Track expenses for 30 days in a row.", "👑", "streak",
                    StreakRule(min_days=30)),

    # Budgeting
    BadgeDefinition("budget_setter", "Planner", "Set a monthly budget.", "📐", "budget",
                    ExistenceRule(collection="budgets")),
    BadgeDefinition("under_budget", "Under Control", "Stay under your total budget for the month.", "🛡️", "budget",
                    UnderBudgetRule(from_day=25)),

    # Spending habits
    BadgeDefinition("no_spend_day", "No Spend Day", "Have a day with 0 expenses.", "🧘", "spending",
                    SpendGapRule()),
    BadgeDefinition("frugal_foodie", "Frugal Foodie", "Spend less than 200 on Food in a transaction.", "🥗", "spending",
                    CategoryAmountBelowRule(category="food", max_amount=200)),
    BadgeDefinition("big_spender", "Big Spender", "Log an expense over 10,000.", "💸", "spending",
                    AmountAboveRule(min_amount=10000)),

    # Categories
    BadgeDefinition("tech_enthusiast", "Tech Enthusiast", "Track 5 expenses in Electronics/Gadgets.", "💻", "spending",
                    CategoryKeywordRule(keywords=_keywords("electronics", "gadgets", "tech"), min_count=5)),
    BadgeDefinition("health_nut", "Health Nut", "Track 5 expenses in Health/Fitness.", "💪", "spending",
                    CategoryKeywordRule(keywords=_keywords("health", "fitness", "gym", "medical"), min_count=5)),
    BadgeDefinition("traveler", "Globetrotter", "Track 5 expenses in Travel.", "✈️", "spending",
                    CategoryKeywordRule(keywords=_keywords("travel", "vacation", "flight", "hotel"), min_count=5)),

    # Goals
    BadgeDefinition("goal_setter", "Goal Setter", "Create a savings goal.", "🎯", "general",
                    ExistenceRule(collection="goals")),

    # Coverage and time of day
    BadgeDefinition("weekend_warrior", "Weekend Tracker", "Track expenses on a Saturday and Sunday.", "🎉", "streak",
                    WeekendCoverageRule()),
    BadgeDefinition("early_bird", "Early Bird", "Track a transaction before 8 AM.", "🌅", "general",
                    TimeOfDayRule(before_hour=8)),
    BadgeDefinition("night_owl", "Night Owl", "Track a transaction after 10 PM.", "🦉", "general",
                    TimeOfDayRule(from_hour=22)),

    # Currency
    BadgeDefinition("international", "International", "Track a transaction in a foreign currency.", "🌍", "general",
                    ForeignCurrencyRule(home_currency=home_currency())),

    # Recurring
    BadgeDefinition("subscriber", "Subscriber", "Add a recurring transaction.", "🔄", "general",
                    RecurringRule()),
)

BADGES_BY_ID: Dict[str, BadgeDefinition] = {badge.id: badge for badge in BADGES}
