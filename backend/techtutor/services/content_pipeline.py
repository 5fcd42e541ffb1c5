"""Content Pipeline — turns untrusted model text into a ContentPackage that is always servable.

Invariants:
    - produce_validated_content NEVER raises a content error: ingestion or validation
      failure substitutes the fallback package wholesale
    - Accepted external content always passes through normalize_content
    - Every fallback substitution is logged at WARNING with the reason

Design Decisions:
    - The fallback package is built first and unconditionally: it is both the
      substitute and the per-field repair source for the normalizer
    - raw_text=None (generation disabled or fetch failed) skips ingestion entirely
"""

import logging

from techtutor.core.domain_types import DifficultyLevel
from techtutor.core.errors import ContentValidationError
from techtutor.core.fallback_content import build_fallback_content
from techtutor.core.ingest_content import extract_content_object
from techtutor.core.normalize_content import normalize_content
from techtutor.core.validate_content import validate_generated_content
from techtutor.schemas.content import ContentPackage

logger = logging.getLogger(__name__)


def produce_validated_content(
    raw_text: str | None, topic: str, level: DifficultyLevel,
) -> ContentPackage:
    fallback = build_fallback_content(topic, level)
    if raw_text is None:
        return fallback

    ingested = extract_content_object(raw_text)
    if not ingested.ok:
        logger.warning(
            f"Serving fallback content: {ingested.error.message}",
            extra={
                "topic_id": fallback.topic.id,
                "error_code": ingested.error.code,
                "generation_source": fallback.generation_source.value,
            },
        )
        return fallback

    try:
        generated = validate_generated_content(ingested.value)
    except ContentValidationError as e:
        logger.warning(
            f"Serving fallback content: {e.message}",
            extra={
                "topic_id": fallback.topic.id,
                "error_code": e.code,
                "field_path": e.field_path,
                "generation_source": fallback.generation_source.value,
            },
        )
        return fallback

    return normalize_content(generated, fallback)
