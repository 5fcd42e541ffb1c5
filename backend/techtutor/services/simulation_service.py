"""Simulation Service — generates a learner's simulation content and records it in history.

Invariants:
    - generate() always returns a ContentPackage: external failures degrade to fallback
    - Exactly ONE update_with_mutator call per generate(), appending one text interaction
    - The external client is called at most once (no retry)

Design Decisions:
    - content_client is optional: None means generation is unconfigured and the
      service goes straight to fallback content without logging a failure
    - The interaction is built before the store call so the mutator only appends
"""

import logging
import uuid
from functools import partial

from techtutor.core import state_mutations
from techtutor.core.domain_types import DifficultyLevel, InteractionType
from techtutor.core.errors import ErrorContext, ExternalContentError
from techtutor.core.fallback_content import fallback_topic_id
from techtutor.infrastructure.content_client import ContentGenerationClient
from techtutor.infrastructure.state_store import StateStore
from techtutor.schemas.content import ContentPackage
from techtutor.schemas.state import InteractionDraft, utc_now
from techtutor.services.content_pipeline import produce_validated_content
from techtutor.services.content_prompt import SYSTEM_PROMPT, build_content_prompt

logger = logging.getLogger(__name__)

INTERACTION_SOURCE = "simulation-generator"


class SimulationService:

    def __init__(
        self, store: StateStore, content_client: ContentGenerationClient | None = None,
    ):
        self.store = store
        self.content_client = content_client

    async def generate(
        self, account_id: str, topic: str, level: DifficultyLevel,
    ) -> ContentPackage:
        raw_text = await self._fetch_raw(account_id, topic, level)
        package = produce_validated_content(raw_text, topic, level)

        draft = InteractionDraft(
            topic_id=package.topic.id,
            type=InteractionType.TEXT,
            input=topic,
            output=package.opening_message,
            meta={
                "source": INTERACTION_SOURCE,
                "level": level.value,
                "generationSource": package.generation_source.value,
            },
        )
        await self.store.update_with_mutator(partial(
            state_mutations.record_interaction,
            account_id=account_id,
            draft=draft,
            interaction_id=str(uuid.uuid4()),
            now=utc_now(),
        ))
        logger.info(
            "Simulation content generated",
            extra={
                "account_id": account_id,
                "topic_id": package.topic.id,
                "generation_source": package.generation_source.value,
            },
        )
        return package

    async def _fetch_raw(
        self, account_id: str, topic: str, level: DifficultyLevel,
    ) -> str | None:
        if self.content_client is None:
            return None
        try:
            return await self.content_client.complete(
                SYSTEM_PROMPT,
                build_content_prompt(topic, level),
                context=ErrorContext(
                    account_id=account_id, topic_id=fallback_topic_id(topic.strip()),
                ),
            )
        except ExternalContentError as e:
            logger.warning(
                f"Content generation failed, using fallback: {e.message}",
                extra={
                    "account_id": account_id,
                    "topic_id": e.context.topic_id,
                    "error_code": e.code,
                },
            )
            return None
