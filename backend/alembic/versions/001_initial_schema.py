"""Initial schema — accounts, preferences, progress, history.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("seq", sa.Integer, nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "preferences",
        sa.Column(
            "account_id", sa.String(64),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("seq", sa.Integer, nullable=False),
        sa.Column("interaction_mode", sa.String(10), nullable=False),
        sa.Column("voice_settings", sa.JSON, nullable=False),
    )

    op.create_table(
        "progress",
        sa.Column(
            "account_id", sa.String(64),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("topic_id", sa.String(128), primary_key=True),
        sa.Column("level", sa.String(20), primary_key=True),
        sa.Column("seq", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("score", sa.Float, nullable=False, server_default="0"),
        sa.Column("time_spent", sa.Float, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "history",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("seq", sa.Integer, nullable=False),
        sa.Column(
            "account_id", sa.String(64),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("topic_id", sa.String(128), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("input", sa.Text, nullable=False),
        sa.Column("output", sa.Text, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("meta", sa.JSON, nullable=False),
    )
    op.create_index(
        "ix_history_account_topic_timestamp", "history",
        ["account_id", "topic_id", "timestamp"],
    )


def downgrade() -> None:
    op.drop_index("ix_history_account_topic_timestamp", table_name="history")
    op.drop_table("history")
    op.drop_table("progress")
    op.drop_table("preferences")
    op.drop_table("accounts")
