"""State Mutations — pure Snapshot mutators passed to StateStore.update_with_mutator.

Invariants:
    - Every function mutates only the Snapshot it is given and returns a derived result
    - No IO, no clock, no uuid: ids and timestamps arrive as arguments
    - A raised error leaves persistence untouched (the store discards the snapshot)
    - Multi-entity invariants (account + preferences, progress + unlock) live in ONE mutator

Design Decisions:
    - Plain functions over methods on Snapshot: LearnerService binds arguments with
      functools.partial and hands the result to the store unchanged
    - Unlock is idempotent: an existing next-level record is never reset
"""

from datetime import datetime

from techtutor.core.domain_types import (
    DEFAULT_PASSING_SCORE, DifficultyLevel, InteractionMode, ProgressStatus,
    next_level,
)
from techtutor.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from techtutor.schemas.state import (
    Account, InteractionDraft, InteractionRecord, Preferences, ProgressRecord,
    ProgressUpdate, Snapshot, VoiceSettings,
)


def normalize_email(email: str) -> str:
    return email.lower().strip()


def require_account(snapshot: Snapshot, account_id: str) -> Account:
    account = snapshot.find_account(account_id)
    if account is None:
        raise ResourceNotFoundError(
            "Account", account_id, ErrorContext(account_id=account_id),
        )
    return account


# ─── Accounts ────────────────────────────────────────────────────

def register_account(
    snapshot: Snapshot, account_id: str, email: str, password_hash: str, now: datetime,
) -> Account:
    """Create an Account and its default Preferences together."""
    normalized = normalize_email(email)
    if snapshot.find_account_by_email(normalized) is not None:
        raise ConflictError(f"Account with email '{normalized}' already exists")

    account = Account(
        id=account_id,
        email=normalized,
        password_hash=password_hash,
        created_at=now,
        last_login_at=now,
    )
    snapshot.accounts.append(account)
    snapshot.preferences.append(Preferences(account_id=account_id))
    return account.model_copy()


def touch_login(snapshot: Snapshot, account_id: str, now: datetime) -> Account:
    account = require_account(snapshot, account_id)
    account.last_login_at = now
    return account.model_copy()


# ─── Progress ────────────────────────────────────────────────────

def update_progress(
    snapshot: Snapshot,
    account_id: str,
    update: ProgressUpdate,
    now: datetime,
    passing_score: float = DEFAULT_PASSING_SCORE,
) -> tuple[ProgressRecord, DifficultyLevel | None]:
    """Upsert the keyed record; completing with a passing score unlocks the next level.

    Returns (record, unlocked_level). unlocked_level is reported whenever the pass
    condition holds, even if the next-level record already existed.
    """
    require_account(snapshot, account_id)
    record = snapshot.find_progress(account_id, update.topic_id, update.level)
    if record is None:
        record = ProgressRecord(
            account_id=account_id,
            topic_id=update.topic_id,
            level=update.level,
            status=update.status,
            score=update.score,
            time_spent=update.time_spent,
            updated_at=now,
        )
        snapshot.progress.append(record)
    else:
        record.status = update.status
        record.score = update.score
        record.time_spent = update.time_spent
        record.updated_at = now

    unlocked = None
    if update.status == ProgressStatus.COMPLETED and update.score >= passing_score:
        unlocked = next_level(update.level)

    if unlocked is not None and snapshot.find_progress(
        account_id, update.topic_id, unlocked,
    ) is None:
        snapshot.progress.append(ProgressRecord(
            account_id=account_id,
            topic_id=update.topic_id,
            level=unlocked,
            status=ProgressStatus.NOT_STARTED,
            updated_at=now,
        ))
    return record.model_copy(), unlocked


def list_progress(snapshot: Snapshot, account_id: str) -> list[ProgressRecord]:
    return [r for r in snapshot.progress if r.account_id == account_id]


# ─── Preferences ─────────────────────────────────────────────────

def save_preferences(
    snapshot: Snapshot,
    account_id: str,
    interaction_mode: InteractionMode,
    voice_settings: VoiceSettings,
) -> Preferences:
    require_account(snapshot, account_id)
    current = snapshot.find_preferences(account_id)
    if current is None:
        current = Preferences(account_id=account_id)
        snapshot.preferences.append(current)
    current.interaction_mode = interaction_mode
    current.voice_settings = voice_settings.model_copy()
    return current.model_copy(deep=True)


# ─── History ─────────────────────────────────────────────────────

def record_interaction(
    snapshot: Snapshot,
    account_id: str,
    draft: InteractionDraft,
    interaction_id: str,
    now: datetime,
) -> InteractionRecord:
    require_account(snapshot, account_id)
    record = InteractionRecord(
        id=interaction_id,
        account_id=account_id,
        topic_id=draft.topic_id,
        type=draft.type,
        input=draft.input,
        output=draft.output,
        timestamp=now,
        meta=dict(draft.meta),
    )
    snapshot.history.append(record)
    return record


def list_history(
    snapshot: Snapshot, account_id: str, topic_id: str | None = None,
) -> list[InteractionRecord]:
    """Account's interactions (optionally one topic), oldest first."""
    matching = [
        h for h in snapshot.history
        if h.account_id == account_id and (topic_id is None or h.topic_id == topic_id)
    ]
    return sorted(matching, key=lambda h: h.timestamp)


def clear_topic_history(snapshot: Snapshot, account_id: str, topic_id: str) -> int:
    before = len(snapshot.history)
    snapshot.history = [
        h for h in snapshot.history
        if not (h.account_id == account_id and h.topic_id == topic_id)
    ]
    return before - len(snapshot.history)
