"""Learner Service — account, progress, preference and history operations on both backends.

Tests cover:
    - register → find by email; duplicate email conflicts without side effects
    - Progress unlock is idempotent (one intermediate record after two completions)
    - Concurrent progress updates for two learners both persist
    - Preferences round trip; history listing and clearing
"""

import asyncio

import pytest

from techtutor.core.domain_types import (
    DifficultyLevel, InteractionMode, InteractionType, ProgressStatus,
)
from techtutor.core.errors import ConflictError, ResourceNotFoundError
from techtutor.schemas.state import InteractionDraft, ProgressUpdate, VoiceSettings
from techtutor.services.learner_service import LearnerService


@pytest.fixture
def service(store):
    return LearnerService(store)


def _completed(level=DifficultyLevel.BEGINNER, score=90.0):
    return ProgressUpdate(
        topic_id="queues", level=level, status=ProgressStatus.COMPLETED,
        score=score, time_spent=60,
    )


async def test_register_and_find_by_email(service):
    account = await service.register_account("  Grace@Example.com", "hash")
    found = await service.find_account_by_email("GRACE@example.com ")
    assert found == account
    preferences = await service.get_preferences(account.id)
    assert preferences.interaction_mode == InteractionMode.BOTH


async def test_duplicate_registration_conflicts(service, store):
    await service.register_account("grace@example.com", "hash")
    with pytest.raises(ConflictError):
        await service.register_account("Grace@example.com", "other")
    snapshot = await store.read()
    assert len(snapshot.accounts) == 1
    assert len(snapshot.preferences) == 1


async def test_touch_login_persists(service):
    account = await service.register_account("grace@example.com", "hash")
    touched = await service.touch_login(account.id)
    assert touched.last_login_at >= account.last_login_at
    assert (await service.find_account_by_email("grace@example.com")).last_login_at == touched.last_login_at


async def test_completing_beginner_twice_unlocks_once(service):
    account = await service.register_account("grace@example.com", "hash")
    _, first = await service.update_progress(account.id, _completed())
    _, second = await service.update_progress(account.id, _completed())
    assert first == second == DifficultyLevel.INTERMEDIATE

    progress = await service.list_progress(account.id)
    levels = sorted(r.level.value for r in progress)
    assert levels == ["beginner", "intermediate"]


async def test_reference_passing_score_blocks_unlock(service):
    account = await service.register_account("grace@example.com", "hash")
    _, unlocked = await service.update_progress(
        account.id, _completed(score=75), passing_score=80,
    )
    assert unlocked is None


async def test_progress_for_unknown_account(service, store):
    with pytest.raises(ResourceNotFoundError):
        await service.update_progress("nobody", _completed())
    assert (await store.read()).progress == []


async def test_concurrent_progress_for_two_learners_both_persist(service, store):
    ada = await service.register_account("ada@example.com", "hash")
    bob = await service.register_account("bob@example.com", "hash")

    await asyncio.gather(
        service.update_progress(ada.id, _completed()),
        service.update_progress(bob.id, _completed()),
    )

    snapshot = await store.read()
    owners = {r.account_id for r in snapshot.progress if r.level == DifficultyLevel.BEGINNER}
    assert owners == {ada.id, bob.id}
    assert len(snapshot.progress) == 4


async def test_save_and_get_preferences(service):
    account = await service.register_account("grace@example.com", "hash")
    await service.save_preferences(
        account.id, InteractionMode.CLICK,
        VoiceSettings(navigation_enabled=False, rate=0.75, voice_name="Echo"),
    )
    preferences = await service.get_preferences(account.id)
    assert preferences.interaction_mode == InteractionMode.CLICK
    assert preferences.voice_settings.navigation_enabled is False
    assert preferences.voice_settings.voice_name == "Echo"


async def test_get_preferences_unknown_account(service):
    with pytest.raises(ResourceNotFoundError):
        await service.get_preferences("nobody")


async def test_history_record_list_and_clear(service):
    account = await service.register_account("grace@example.com", "hash")
    for text in ("first", "second"):
        await service.record_interaction(account.id, InteractionDraft(
            topic_id="queues", type=InteractionType.VOICE, input=text, output="ok",
            meta={"confidence": 0.9},
        ))
    await service.record_interaction(account.id, InteractionDraft(
        topic_id="caching", type=InteractionType.ACTION, input="drag", output="ok",
    ))

    queues = await service.list_history(account.id, "queues")
    assert [h.input for h in queues] == ["first", "second"]
    assert queues[0].meta == {"confidence": 0.9}

    assert await service.clear_topic_history(account.id, "queues") == 2
    remaining = await service.list_history(account.id)
    assert [h.topic_id for h in remaining] == ["caching"]
