"""Interaction ORM — immutable learner interaction history.

Invariants:
    - Rows are only ever inserted by a snapshot replace, never updated in place
    - Listing is by (account, topic, timestamp), hence the composite index

Design Decisions:
    - JSON column for meta: free-form per interaction source
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from techtutor.db.base import Base


class InteractionRow(Base):
    __tablename__ = "history"
    __table_args__ = (
        Index("ix_history_account_topic_timestamp", "account_id", "topic_id", "timestamp"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
    )
    topic_id: Mapped[str] = mapped_column(String(128), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    input: Mapped[str] = mapped_column(Text, nullable=False)
    output: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
