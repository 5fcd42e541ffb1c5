"""State Store — contract tests run against BOTH backends.

Tests cover:
    - Fresh store reads empty; write(S) then read() deep-equals S (order included)
    - Concurrent update_with_mutator calls lose no updates
    - A raising mutator or an integrity violation leaves the store unchanged
    - A cancelled caller does not cancel a started unit of work; a late failure is logged
    - health_check reports a reachable store
"""

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from techtutor.core.domain_types import (
    DifficultyLevel, InteractionMode, InteractionType, ProgressStatus,
)
from techtutor.core.errors import StorageError
from techtutor.schemas.state import (
    Account, InteractionRecord, Preferences, ProgressRecord, Snapshot, VoiceSettings,
)

T0 = datetime(2026, 3, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)


def _account(account_id: str) -> Account:
    return Account(
        id=account_id, email=f"{account_id}@example.com",
        password_hash="hash", created_at=T0, last_login_at=T0,
    )


def _sample_snapshot() -> Snapshot:
    return Snapshot(
        accounts=[_account("acc-c"), _account("acc-a"), _account("acc-b")],
        preferences=[
            Preferences(account_id="acc-c"),
            Preferences(
                account_id="acc-a", interaction_mode=InteractionMode.VOICE,
                voice_settings=VoiceSettings(rate=1.25, voice_name="Nova"),
            ),
            Preferences(account_id="acc-b"),
        ],
        progress=[
            ProgressRecord(
                account_id="acc-a", topic_id="queues",
                level=DifficultyLevel.BEGINNER, status=ProgressStatus.COMPLETED,
                score=85.5, time_spent=300, updated_at=T0,
            ),
            ProgressRecord(
                account_id="acc-a", topic_id="queues",
                level=DifficultyLevel.INTERMEDIATE,
                status=ProgressStatus.NOT_STARTED, updated_at=T0,
            ),
        ],
        history=[
            InteractionRecord(
                id="h-2", account_id="acc-a", topic_id="queues",
                type=InteractionType.TEXT, input="queues", output="Generated",
                timestamp=T0, meta={"source": "simulation-generator", "level": "beginner"},
            ),
            InteractionRecord(
                id="h-1", account_id="acc-b", topic_id="caching",
                type=InteractionType.VOICE, input="what is a cache", output="A cache...",
                timestamp=T0,
            ),
        ],
    )


def _progress(account_id: str) -> ProgressRecord:
    return ProgressRecord(
        account_id=account_id, topic_id="queues", level=DifficultyLevel.BEGINNER,
        status=ProgressStatus.IN_PROGRESS, updated_at=T0,
    )


# ─── Read / write ────────────────────────────────────────────────

async def test_fresh_store_reads_empty(store):
    assert await store.read() == Snapshot()


async def test_write_then_read_round_trips(store):
    snapshot = _sample_snapshot()
    await store.write(snapshot)
    assert (await store.read()).model_dump() == snapshot.model_dump()


async def test_write_replaces_whole_state(store):
    await store.write(_sample_snapshot())
    replacement = Snapshot(accounts=[_account("acc-z")], preferences=[Preferences(account_id="acc-z")])
    await store.write(replacement)
    assert (await store.read()).model_dump() == replacement.model_dump()


async def test_read_returns_detached_snapshot(store):
    await store.write(_sample_snapshot())
    snapshot = await store.read()
    snapshot.accounts.clear()
    assert len((await store.read()).accounts) == 3


def _with_duplicate_id(snapshot: Snapshot) -> None:
    snapshot.accounts.append(_account("acc-a"))


def _with_duplicate_email(snapshot: Snapshot) -> None:
    twin = _account("acc-twin")
    twin.email = "acc-a@example.com"
    snapshot.accounts.append(twin)
    snapshot.preferences.append(Preferences(account_id="acc-twin"))


def _with_orphan_progress(snapshot: Snapshot) -> None:
    snapshot.progress.append(_progress("acc-gone"))


@pytest.mark.parametrize(
    "corrupt, reason",
    [
        (_with_duplicate_id, "duplicate account id 'acc-a'"),
        (_with_duplicate_email, "duplicate account email 'acc-a@example.com'"),
        (_with_orphan_progress, "progress for unknown account 'acc-gone'"),
    ],
)
async def test_write_with_duplicate_keys_is_rejected(store, corrupt, reason):
    snapshot = _sample_snapshot()
    corrupt(snapshot)
    with pytest.raises(StorageError) as exc_info:
        await store.write(snapshot)
    assert reason in exc_info.value.message
    assert await store.read() == Snapshot()


# ─── update_with_mutator ─────────────────────────────────────────

async def test_mutator_result_is_returned_and_state_persisted(store):
    def add_account(snapshot):
        snapshot.accounts.append(_account("acc-1"))
        return len(snapshot.accounts)

    assert await store.update_with_mutator(add_account) == 1
    assert [a.id for a in (await store.read()).accounts] == ["acc-1"]


async def test_concurrent_mutations_lose_no_updates(store):
    await store.write(Snapshot(accounts=[_account("acc-1")], progress=[_progress("acc-1")]))

    def bump(snapshot):
        snapshot.progress[0].time_spent += 1
        return snapshot.progress[0].time_spent

    results = await asyncio.gather(*(store.update_with_mutator(bump) for _ in range(25)))

    assert sorted(results) == [float(i) for i in range(1, 26)]
    assert (await store.read()).progress[0].time_spent == 25


async def test_raising_mutator_leaves_store_unchanged(store):
    await store.write(_sample_snapshot())
    before = (await store.read()).model_dump()

    def explode(snapshot):
        snapshot.accounts.clear()
        snapshot.history.clear()
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await store.update_with_mutator(explode)
    assert (await store.read()).model_dump() == before


async def test_integrity_violation_leaves_store_unchanged(store):
    await store.write(_sample_snapshot())
    before = (await store.read()).model_dump()

    def duplicate_progress(snapshot):
        snapshot.progress.append(snapshot.progress[0].model_copy())

    with pytest.raises(StorageError) as exc_info:
        await store.update_with_mutator(duplicate_progress)
    assert "duplicate progress key" in exc_info.value.message
    assert (await store.read()).model_dump() == before


async def test_cancelled_caller_does_not_cancel_started_unit(store):
    def add_account(snapshot):
        snapshot.accounts.append(_account("acc-1"))

    task = asyncio.create_task(store.update_with_mutator(add_account))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    for _ in range(200):
        if (await store.read()).accounts:
            break
        await asyncio.sleep(0.01)
    assert [a.id for a in (await store.read()).accounts] == ["acc-1"]


async def test_failure_after_caller_cancelled_is_logged(store, caplog):
    caplog.set_level(logging.ERROR, logger="techtutor.infrastructure.state_store")

    def explode(snapshot):
        raise ValueError("mutator failed late")

    task = asyncio.create_task(store.update_with_mutator(explode))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    def detached_failures():
        return [
            r for r in caplog.records
            if r.name == "techtutor.infrastructure.state_store"
            and "mutator failed late" in r.getMessage()
        ]

    for _ in range(200):
        if detached_failures():
            break
        await asyncio.sleep(0.01)
    assert len(detached_failures()) == 1
    assert await store.read() == Snapshot()


async def test_health_check_reports_reachable_store(store):
    assert await store.health_check() is True
