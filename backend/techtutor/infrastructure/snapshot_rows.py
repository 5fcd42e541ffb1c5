"""Snapshot ↔ Rows — maps the in-memory Snapshot onto the four relational tables.

Invariants:
    - rows_from_snapshot followed by snapshot_from_rows reproduces the Snapshot
      (same records, same list order via `seq`, same instants)
    - Timestamps are written as UTC; naive values read back are tagged UTC
    - TABLE_ORDER is parent-first: insert in order, delete in reverse

Design Decisions:
    - Plain dicts for Core insert()/select(): no ORM identity map to go stale
      between the clear and the re-insert of the same primary keys
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from sqlalchemy import Table

from techtutor.models import AccountRow, InteractionRow, PreferencesRow, ProgressRow
from techtutor.schemas.state import (
    Account, InteractionRecord, Preferences, ProgressRecord, Snapshot,
)

TABLE_ORDER: tuple[Table, ...] = (
    AccountRow.__table__,
    PreferencesRow.__table__,
    ProgressRow.__table__,
    InteractionRow.__table__,
)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_db(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def rows_from_snapshot(snapshot: Snapshot) -> dict[str, list[dict[str, Any]]]:
    """Table name -> insertable row dicts."""
    return {
        "accounts": [
            {
                "id": a.id, "seq": seq, "email": a.email,
                "password_hash": a.password_hash,
                "created_at": _to_utc(a.created_at),
                "last_login_at": _to_utc(a.last_login_at),
            }
            for seq, a in enumerate(snapshot.accounts)
        ],
        "preferences": [
            {
                "account_id": p.account_id, "seq": seq,
                "interaction_mode": p.interaction_mode.value,
                "voice_settings": p.voice_settings.model_dump(mode="json"),
            }
            for seq, p in enumerate(snapshot.preferences)
        ],
        "progress": [
            {
                "account_id": r.account_id, "topic_id": r.topic_id,
                "level": r.level.value, "seq": seq, "status": r.status.value,
                "score": r.score, "time_spent": r.time_spent,
                "updated_at": _to_utc(r.updated_at),
            }
            for seq, r in enumerate(snapshot.progress)
        ],
        "history": [
            {
                "id": h.id, "seq": seq, "account_id": h.account_id,
                "topic_id": h.topic_id, "type": h.type.value,
                "input": h.input, "output": h.output,
                "timestamp": _to_utc(h.timestamp), "meta": dict(h.meta),
            }
            for seq, h in enumerate(snapshot.history)
        ],
    }


def snapshot_from_rows(
    rows: Mapping[str, Sequence[Mapping[str, Any]]],
) -> Snapshot:
    """Inverse of rows_from_snapshot; each sequence must already be ordered by seq."""
    return Snapshot(
        accounts=[
            Account(
                id=r["id"], email=r["email"], password_hash=r["password_hash"],
                created_at=_from_db(r["created_at"]),
                last_login_at=_from_db(r["last_login_at"]),
            )
            for r in rows["accounts"]
        ],
        preferences=[
            Preferences(
                account_id=r["account_id"],
                interaction_mode=r["interaction_mode"],
                voice_settings=r["voice_settings"],
            )
            for r in rows["preferences"]
        ],
        progress=[
            ProgressRecord(
                account_id=r["account_id"], topic_id=r["topic_id"],
                level=r["level"], status=r["status"], score=r["score"],
                time_spent=r["time_spent"], updated_at=_from_db(r["updated_at"]),
            )
            for r in rows["progress"]
        ],
        history=[
            InteractionRecord(
                id=r["id"], account_id=r["account_id"], topic_id=r["topic_id"],
                type=r["type"], input=r["input"], output=r["output"],
                timestamp=_from_db(r["timestamp"]), meta=r["meta"] or {},
            )
            for r in rows["history"]
        ],
    )
