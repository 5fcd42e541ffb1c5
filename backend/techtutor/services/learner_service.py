"""Learner Service — account, progress, preference and history operations over a StateStore.

Invariants:
    - Every mutating method is exactly ONE update_with_mutator call
    - Ids (uuid4) and timestamps (UTC) are generated here, outside the mutator,
      so the mutators in core/state_mutations.py stay pure
    - Read-only methods use store.read() and never persist

Design Decisions:
    - Handler class with the store injected in __init__: no module-level state,
      tests pass either backend
    - functools.partial binds arguments; the store only ever sees Snapshot -> T
"""

import logging
import uuid
from functools import partial

from techtutor.core import state_mutations
from techtutor.core.domain_types import (
    DEFAULT_PASSING_SCORE, DifficultyLevel, InteractionMode,
)
from techtutor.core.errors import ErrorContext, ResourceNotFoundError
from techtutor.infrastructure.state_store import StateStore
from techtutor.schemas.state import (
    Account, InteractionDraft, InteractionRecord, Preferences, ProgressRecord,
    ProgressUpdate, VoiceSettings, utc_now,
)

logger = logging.getLogger(__name__)


class LearnerService:
    """Learner-facing state operations; each write is atomic across entities."""

    def __init__(self, store: StateStore):
        self.store = store

    # ─── Accounts ────────────────────────────────────────────────

    async def register_account(self, email: str, password_hash: str) -> Account:
        account = await self.store.update_with_mutator(partial(
            state_mutations.register_account,
            account_id=str(uuid.uuid4()),
            email=email,
            password_hash=password_hash,
            now=utc_now(),
        ))
        logger.info("Account registered", extra={"account_id": account.id})
        return account

    async def touch_login(self, account_id: str) -> Account:
        return await self.store.update_with_mutator(partial(
            state_mutations.touch_login, account_id=account_id, now=utc_now(),
        ))

    async def find_account_by_email(self, email: str) -> Account | None:
        snapshot = await self.store.read()
        return snapshot.find_account_by_email(state_mutations.normalize_email(email))

    # ─── Progress ────────────────────────────────────────────────

    async def update_progress(
        self,
        account_id: str,
        update: ProgressUpdate,
        passing_score: float = DEFAULT_PASSING_SCORE,
    ) -> tuple[ProgressRecord, DifficultyLevel | None]:
        record, unlocked = await self.store.update_with_mutator(partial(
            state_mutations.update_progress,
            account_id=account_id,
            update=update,
            now=utc_now(),
            passing_score=passing_score,
        ))
        if unlocked is not None:
            logger.info(
                f"Level {unlocked.value} unlocked",
                extra={"account_id": account_id, "topic_id": update.topic_id},
            )
        return record, unlocked

    async def list_progress(self, account_id: str) -> list[ProgressRecord]:
        snapshot = await self.store.read()
        return state_mutations.list_progress(snapshot, account_id)

    # ─── Preferences ─────────────────────────────────────────────

    async def get_preferences(self, account_id: str) -> Preferences:
        snapshot = await self.store.read()
        preferences = snapshot.find_preferences(account_id)
        if preferences is None:
            raise ResourceNotFoundError(
                "Preferences", account_id, ErrorContext(account_id=account_id),
            )
        return preferences

    async def save_preferences(
        self,
        account_id: str,
        interaction_mode: InteractionMode,
        voice_settings: VoiceSettings,
    ) -> Preferences:
        return await self.store.update_with_mutator(partial(
            state_mutations.save_preferences,
            account_id=account_id,
            interaction_mode=interaction_mode,
            voice_settings=voice_settings,
        ))

    # ─── History ─────────────────────────────────────────────────

    async def record_interaction(
        self, account_id: str, draft: InteractionDraft,
    ) -> InteractionRecord:
        return await self.store.update_with_mutator(partial(
            state_mutations.record_interaction,
            account_id=account_id,
            draft=draft,
            interaction_id=str(uuid.uuid4()),
            now=utc_now(),
        ))

    async def list_history(
        self, account_id: str, topic_id: str | None = None,
    ) -> list[InteractionRecord]:
        snapshot = await self.store.read()
        return state_mutations.list_history(snapshot, account_id, topic_id)

    async def clear_topic_history(self, account_id: str, topic_id: str) -> int:
        removed = await self.store.update_with_mutator(partial(
            state_mutations.clear_topic_history,
            account_id=account_id,
            topic_id=topic_id,
        ))
        logger.info(
            f"Cleared {removed} interaction(s)",
            extra={"account_id": account_id, "topic_id": topic_id},
        )
        return removed
