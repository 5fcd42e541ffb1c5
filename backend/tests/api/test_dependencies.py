"""Request Dependencies — services built from app.state for route handlers.

Tests cover:
    - get_learner_service wraps the lifespan store
    - get_simulation_service picks up the content client, or runs fallback-only without one
"""

import json

import pytest
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from techtutor.api.dependencies import get_learner_service, get_simulation_service
from techtutor.core.domain_types import DifficultyLevel
from techtutor.infrastructure.file_state_store import FileStateStore
from techtutor.services.learner_service import LearnerService
from techtutor.services.simulation_service import SimulationService
from tests.services.fake_content_client import FakeContentClient


def _service_app(store, content_client=None) -> FastAPI:
    service_app = FastAPI()
    service_app.state.store = store
    if content_client is not None:
        service_app.state.content_client = content_client

    @service_app.post("/accounts")
    async def register(learners: LearnerService = Depends(get_learner_service)):
        account = await learners.register_account("ada@example.com", "hash")
        return {"id": account.id}

    @service_app.post("/accounts/{account_id}/simulations")
    async def generate(
        account_id: str,
        simulations: SimulationService = Depends(get_simulation_service),
    ):
        package = await simulations.generate(
            account_id, "Message Queues", DifficultyLevel.BEGINNER,
        )
        return {"source": package.generation_source.value}

    return service_app


@pytest.fixture
async def file_store(tmp_path):
    store = FileStateStore(tmp_path / "store.json")
    await store.open()
    yield store
    await store.close()


async def _register_and_generate(service_app) -> str:
    transport = ASGITransport(app=service_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        account_id = (await client.post("/accounts")).json()["id"]
        response = await client.post(f"/accounts/{account_id}/simulations")
        assert response.status_code == 200
        return response.json()["source"]


async def test_services_share_the_app_store(file_store):
    source = await _register_and_generate(_service_app(file_store))

    assert source == "template"
    snapshot = await file_store.read()
    assert len(snapshot.accounts) == 1
    assert snapshot.history[0].account_id == snapshot.accounts[0].id


async def test_simulation_service_uses_app_content_client(file_store, valid_payload):
    client = FakeContentClient(text=json.dumps(valid_payload))

    source = await _register_and_generate(_service_app(file_store, client))

    assert source == "external"
    assert len(client.calls) == 1
