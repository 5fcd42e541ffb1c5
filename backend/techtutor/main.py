"""TechTutor API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TutorError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - State store built and opened on startup, closed on shutdown, via lifespan;
      reachable only through app.state (no module-level singleton)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Content client is optional on app.state: None means fallback-only generation
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techtutor.api.error_handlers import register_error_handlers
from techtutor.api.routes import health
from techtutor.config import get_settings
from techtutor.infrastructure.content_client import build_content_client
from techtutor.infrastructure.observability import setup_logging
from techtutor.infrastructure.store_factory import build_state_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    store = build_state_store(settings)
    await store.open()
    app.state.store = store
    app.state.content_client = build_content_client(settings)
    logger.info("TechTutor API started", extra={"backend": store.backend})
    yield
    logger.info("TechTutor API shutting down")
    await store.close()


app = FastAPI(
    title="TechTutor API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)

register_error_handlers(app)
