"""Create users, transactions, budgets, goals, insights, badge unlocks, audit logs (idempotent).

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c3e5f70b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(bind, name: str) -> bool:
    return name in sa.inspect(bind).get_table_names()


def upgrade() -> None:
    bind = op.get_bind()

    if not _table_exists(bind, "users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("name", sa.String(length=200), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _table_exists(bind, "transactions"):
        op.create_table(
            "transactions",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("type", sa.String(length=10), nullable=False),
            sa.Column("amount", sa.Float(), nullable=False),
            sa.Column("description", sa.String(length=200), nullable=True),
            sa.Column("category", sa.String(length=120), nullable=True),
            sa.Column("occurred_at", sa.DateTime(), nullable=False),
            sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("frequency", sa.String(length=10), nullable=True),
            sa.Column("original_currency", sa.String(length=3), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_transactions_user_occurred", "transactions", ["user_id", "occurred_at"])
        op.create_index("ix_transactions_user_type", "transactions", ["user_id", "type"])

    if not _table_exists(bind, "budgets"):
        op.create_table(
            "budgets",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("month", sa.String(length=7), nullable=False),
            sa.Column("amount", sa.Float(), nullable=False),
            sa.Column("category", sa.String(length=120), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("user_id", "month", "category", name="uq_budget_user_month_category"),
        )
        op.create_index("ix_budgets_user_month", "budgets", ["user_id", "month"])

    if not _table_exists(bind, "savings_goals"):
        op.create_table(
            "savings_goals",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("target_amount", sa.Float(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_savings_goals_user_id", "savings_goals", ["user_id"])

    if not _table_exists(bind, "insights"):
        op.create_table(
            "insights",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("type", sa.String(length=32), nullable=False),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("data", sa.JSON(), nullable=False),
            sa.Column("confidence", sa.String(length=10), nullable=False),
            sa.Column("status", sa.String(length=16), nullable=False),
            sa.Column("discriminator", sa.String(length=200), nullable=True),
            sa.Column("open_key", sa.String(length=200), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("user_id", "type", "open_key", name="uq_insight_user_type_open_key"),
        )
        op.create_index("ix_insights_user_status", "insights", ["user_id", "status"])
        op.create_index("ix_insights_user_type", "insights", ["user_id", "type"])

    if not _table_exists(bind, "badge_unlocks"):
        op.create_table(
            "badge_unlocks",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("badge_id", sa.String(length=64), nullable=False),
            sa.Column("unlocked_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("user_id", "badge_id", name="uq_badge_unlock_user_badge"),
        )
        op.create_index("ix_badge_unlocks_user_id", "badge_unlocks", ["user_id"])

    if not _table_exists(bind, "audit_logs"):
        op.create_table(
            "audit_logs",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("event_type", sa.String(length=80), nullable=False),
            sa.Column("actor", sa.String(length=40), nullable=False),
            sa.Column("reason", sa.String(length=200), nullable=True),
            sa.Column("insight_id", sa.String(length=36), nullable=True),
            sa.Column("badge_id", sa.String(length=64), nullable=True),
            sa.Column("before_state", sa.JSON(), nullable=True),
            sa.Column("after_state", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
        op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
        op.create_index("ix_audit_logs_insight_id", "audit_logs", ["insight_id"])


def downgrade() -> None:
    bind = op.get_bind()

    for name in (
        "audit_logs",
        "badge_unlocks",
        "insights",
        "savings_goals",
        "budgets",
        "transactions",
        "users",
    ):
        if _table_exists(bind, name):
            op.drop_table(name)
