"""Content Generation Client — one-shot AsyncAnthropic call returning raw model text.

Invariants:
    - Exactly ONE attempt per request: SDK retries disabled (max_retries=0), no backoff loop
    - All SDK failures mapped to ExternalContentError (core/errors.py)
    - Returns raw text only: parsing and validation belong to the content pipeline

Design Decisions:
    - No retry: a failed fetch is absorbed by fallback content, so retrying only
      adds latency to a request that already has a good answer
    - build_content_client returns None when unconfigured: callers branch on
      presence instead of catching configuration errors
"""

import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    RateLimitError,
)

from techtutor.config import Settings
from techtutor.core.errors import ErrorContext, ExternalContentError

logger = logging.getLogger(__name__)


class ContentGenerationClient:
    """Wraps AsyncAnthropic for single-shot content generation with error mapping."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4096,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self, system: str, prompt: str, context: ErrorContext | None = None,
    ) -> str:
        """Raw text of one model response to `prompt`."""
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{
                    "role": "user",
                    "content": prompt,
                }],
            )
        except APITimeoutError:
            raise ExternalContentError("API timeout", "timeout", context=context)
        except RateLimitError:
            raise ExternalContentError(
                "Rate limit exceeded", "rate_limit", context=context,
            )
        except APIConnectionError as e:
            raise ExternalContentError(str(e), "connection_error", context=context)
        except APIStatusError as e:
            error_type = "server_error" if e.status_code >= 500 else "client_error"
            raise ExternalContentError(str(e), error_type, context=context)
        except APIError as e:
            raise ExternalContentError(str(e), "unknown", context=context)

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        logger.info(
            "Content generation success",
            extra={
                "topic_id": context.topic_id if context else None,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        if not text.strip():
            raise ExternalContentError("Empty response", "empty_response", context=context)
        return text


def build_content_client(settings: Settings) -> ContentGenerationClient | None:
    if not settings.content_generation_enabled:
        logger.info("External content generation disabled; serving fallback content")
        return None
    return ContentGenerationClient(
        api_key=settings.anthropic_api_key,
        model=settings.content_model,
        max_tokens=settings.content_max_tokens,
        timeout_seconds=settings.content_timeout_seconds,
    )
