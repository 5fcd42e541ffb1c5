"""Request Dependencies — hand the lifespan-built store and services to handlers.

Invariants:
    - The store and content client live on app.state (set by main.lifespan);
      nothing is module-global
    - Services are built per request around the shared store: they hold no state
      of their own, so construction is cheap and needs no teardown
    - A missing content client (generation disabled) yields a fallback-only
      SimulationService, never an error
"""

from fastapi import Depends, Request

from techtutor.infrastructure.content_client import ContentGenerationClient
from techtutor.infrastructure.state_store import StateStore
from techtutor.services.learner_service import LearnerService
from techtutor.services.simulation_service import SimulationService


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def get_content_client(request: Request) -> ContentGenerationClient | None:
    return getattr(request.app.state, "content_client", None)


def get_learner_service(store: StateStore = Depends(get_store)) -> LearnerService:
    return LearnerService(store)


def get_simulation_service(
    store: StateStore = Depends(get_store),
    content_client: ContentGenerationClient | None = Depends(get_content_client),
) -> SimulationService:
    return SimulationService(store, content_client)
