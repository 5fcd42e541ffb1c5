"""Simulation Service — generation with a stub client, recorded in learner history.

Tests cover:
    - Unconfigured client: template content, history entry with generation metadata
    - Valid model text: external content
    - Client failure: one call, no retry, template content
    - Unknown account: ResourceNotFoundError, nothing persisted
"""

import json

import pytest

from techtutor.core.domain_types import DifficultyLevel, GenerationSource, InteractionType
from techtutor.core.errors import ExternalContentError, ResourceNotFoundError
from techtutor.services.learner_service import LearnerService
from techtutor.services.simulation_service import INTERACTION_SOURCE, SimulationService
from tests.services.fake_content_client import FakeContentClient


@pytest.fixture
async def account(store):
    return await LearnerService(store).register_account("ada@example.com", "hash")


async def test_without_client_serves_template_and_records_history(store, account):
    service = SimulationService(store)
    package = await service.generate(account.id, "Load Balancing", DifficultyLevel.ADVANCED)

    assert package.generation_source == GenerationSource.TEMPLATE
    history = (await store.read()).history
    assert len(history) == 1
    entry = history[0]
    assert entry.account_id == account.id
    assert entry.topic_id == package.topic.id
    assert entry.type == InteractionType.TEXT
    assert entry.input == "Load Balancing"
    assert entry.output == package.opening_message
    assert entry.meta == {
        "source": INTERACTION_SOURCE,
        "level": "advanced",
        "generationSource": "template",
    }


async def test_valid_model_text_serves_external(store, account, valid_payload):
    client = FakeContentClient(text=json.dumps(valid_payload))
    service = SimulationService(store, client)

    package = await service.generate(account.id, "Message Queues", DifficultyLevel.BEGINNER)

    assert package.generation_source == GenerationSource.EXTERNAL
    assert len(client.calls) == 1
    _, prompt = client.calls[0]
    assert "Message Queues" in prompt
    assert (await store.read()).history[0].meta["generationSource"] == "external"


async def test_client_failure_falls_back_without_retry(store, account):
    client = FakeContentClient(error=ExternalContentError("upstream 500", "api_error"))
    service = SimulationService(store, client)

    package = await service.generate(account.id, "Caching", DifficultyLevel.INTERMEDIATE)

    assert package.generation_source == GenerationSource.TEMPLATE
    assert len(client.calls) == 1


async def test_unknown_account(store):
    service = SimulationService(store)
    with pytest.raises(ResourceNotFoundError):
        await service.generate("nobody", "Caching", DifficultyLevel.BEGINNER)
    assert (await store.read()).history == []


async def test_client_context_names_account_and_topic(store, account, valid_payload):
    client = FakeContentClient(text=json.dumps(valid_payload))
    service = SimulationService(store, client)

    package = await service.generate(account.id, "  Message Queues ", DifficultyLevel.BEGINNER)

    context = client.contexts[0]
    assert context.account_id == account.id
    assert context.topic_id == package.topic.id
