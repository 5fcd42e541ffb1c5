"""Preferences ORM — interaction mode and voice settings, one row per account."""

from sqlalchemy import String, Integer, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from techtutor.db.base import Base


class PreferencesRow(Base):
    __tablename__ = "preferences"

    account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True,
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    interaction_mode: Mapped[str] = mapped_column(String(10), nullable=False)
    # VoiceSettings as-is; never queried field by field
    voice_settings: Mapped[dict] = mapped_column(JSON, nullable=False)
