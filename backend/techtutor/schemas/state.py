"""State Records — the four persisted collections and the Snapshot that holds them.

Invariants:
    - Snapshot is the complete state of accounts, preferences, progress, history
    - Every Account owns exactly one Preferences record (created together)
    - ProgressRecord key (account_id, topic_id, level) is unique within a Snapshot
    - Account email is unique; every record's account_id names an existing Account
      (integrity_violations mirrors the relational UNIQUE and FOREIGN KEY constraints)
    - InteractionRecord is frozen once created

Design Decisions:
    - Pydantic over dataclasses: the file backend round-trips the Snapshot as one JSON
      document, model_dump/model_validate give that for free
    - Lookup helpers live on Snapshot so mutators never re-implement key matching
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from techtutor.core.domain_types import (
    DifficultyLevel, InteractionMode, InteractionType, ProgressStatus,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VoiceSettings(BaseModel):
    narration_enabled: bool = True
    interaction_enabled: bool = True
    navigation_enabled: bool = True
    rate: float = Field(default=1.0, ge=0.5, le=2.0)
    voice_name: str = ""


class Account(BaseModel):
    id: str
    email: str
    password_hash: str
    created_at: datetime
    last_login_at: datetime


class Preferences(BaseModel):
    account_id: str
    interaction_mode: InteractionMode = InteractionMode.BOTH
    voice_settings: VoiceSettings = Field(default_factory=VoiceSettings)


class ProgressRecord(BaseModel):
    account_id: str
    topic_id: str
    level: DifficultyLevel
    status: ProgressStatus
    score: float = Field(default=0.0, ge=0, le=100)
    time_spent: float = Field(default=0.0, ge=0)
    updated_at: datetime

    @property
    def key(self) -> tuple[str, str, DifficultyLevel]:
        return (self.account_id, self.topic_id, self.level)


class InteractionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    account_id: str
    topic_id: str
    type: InteractionType
    input: str
    output: str
    timestamp: datetime
    meta: dict[str, Any] = Field(default_factory=dict)


# ─── Mutation inputs ─────────────────────────────────────────────

class ProgressUpdate(BaseModel):
    topic_id: str = Field(min_length=1)
    level: DifficultyLevel
    status: ProgressStatus
    score: float = Field(default=0.0, ge=0, le=100)
    time_spent: float = Field(default=0.0, ge=0)


class InteractionDraft(BaseModel):
    """Caller-supplied part of an InteractionRecord; id and timestamp are assigned on append."""
    topic_id: str = Field(min_length=1)
    type: InteractionType
    input: str = Field(min_length=1)
    output: str = Field(min_length=1)
    meta: dict[str, Any] = Field(default_factory=dict)


# ─── Snapshot ────────────────────────────────────────────────────

class Snapshot(BaseModel):
    """Complete in-memory state of all four persisted collections."""

    accounts: list[Account] = Field(default_factory=list)
    preferences: list[Preferences] = Field(default_factory=list)
    progress: list[ProgressRecord] = Field(default_factory=list)
    history: list[InteractionRecord] = Field(default_factory=list)

    def find_account(self, account_id: str) -> Account | None:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_account_by_email(self, email: str) -> Account | None:
        return next((a for a in self.accounts if a.email == email), None)

    def find_preferences(self, account_id: str) -> Preferences | None:
        return next(
            (p for p in self.preferences if p.account_id == account_id), None,
        )

    def find_progress(
        self, account_id: str, topic_id: str, level: DifficultyLevel,
    ) -> ProgressRecord | None:
        key = (account_id, topic_id, level)
        return next((r for r in self.progress if r.key == key), None)

    def integrity_violations(self) -> list[str]:
        """Describe every duplicated unique key or dangling account reference.

        Empty list means the snapshot is storable on every backend.
        """
        violations: list[str] = []
        violations += _duplicates("account id", (a.id for a in self.accounts))
        violations += _duplicates("account email", (a.email for a in self.accounts))
        violations += _duplicates(
            "preferences owner", (p.account_id for p in self.preferences),
        )
        violations += _duplicates(
            "progress key",
            (f"{r.account_id}/{r.topic_id}/{r.level.value}" for r in self.progress),
        )
        violations += _duplicates("interaction id", (h.id for h in self.history))

        account_ids = {a.id for a in self.accounts}
        for label, owners in (
            ("preferences", (p.account_id for p in self.preferences)),
            ("progress", (r.account_id for r in self.progress)),
            ("interaction", (h.account_id for h in self.history)),
        ):
            missing = sorted({o for o in owners if o not in account_ids})
            violations += [f"{label} for unknown account '{o}'" for o in missing]
        return violations


def _duplicates(label: str, keys) -> list[str]:
    seen: set = set()
    reported: set = set()
    out: list[str] = []
    for key in keys:
        if key in seen and key not in reported:
            out.append(f"duplicate {label} '{key}'")
            reported.add(key)
        seen.add(key)
    return out
