"""Content Ingestion — extracts one JSON object from untrusted model output.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - extract_content_object never raises: failures come back as IngestionResult.error
    - Only object-shaped payloads are accepted (a bare list or string is a format error)
    - Strict JSON only: NaN / Infinity / -Infinity tokens are a format error

Design Decisions:
    - Tagged result over exceptions: the pipeline branches on .ok, and the
      direct-parse attempt is a plain `is not None` check feeding the fallback path
    - Candidates in order: ```json fences, then any other fence, then the whole text;
      the first candidate whose brace span parses wins
    - First "{" to last "}" inside a candidate: tolerates prose before and after the payload
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from techtutor.core.errors import ContentFormatError

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_ANY_FENCE = re.compile(r"```[\w+-]*\s*(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class IngestionResult:
    """Either a parsed object (value) or the reason none was found (error)."""
    value: dict[str, Any] | None = None
    error: ContentFormatError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_content_object(raw: str) -> IngestionResult:
    """Locate and parse the single JSON object embedded in `raw`."""
    trimmed = raw.strip()
    direct = _parse_object(trimmed)
    if direct is not None:
        return IngestionResult(value=direct)

    saw_braces = False
    for candidate in _candidates(trimmed):
        span = _brace_span(candidate)
        if span is None:
            continue
        saw_braces = True
        embedded = _parse_object(span)
        if embedded is not None:
            return IngestionResult(value=embedded)

    if not saw_braces:
        return IngestionResult(error=ContentFormatError(
            "No JSON object found in model output",
        ))
    return IngestionResult(error=ContentFormatError(
        "Model output contained braces but no parseable JSON object",
    ))


def parse_content_object(raw: str) -> dict[str, Any]:
    """Raising variant of extract_content_object."""
    result = extract_content_object(raw)
    if result.error is not None:
        raise result.error
    return result.value


def _candidates(text: str) -> list[str]:
    json_fenced = [m.group(1) for m in _JSON_FENCE.finditer(text)]
    other_fenced = [
        m.group(1) for m in _ANY_FENCE.finditer(text) if m.group(1) not in json_fenced
    ]
    return json_fenced + other_fenced + [text]


def _brace_span(text: str) -> str | None:
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last <= first:
        return None
    return text[first:last + 1]


def _reject_constant(token: str):
    raise ValueError(f"non-finite number '{token}' is not valid JSON")


def _parse_object(text: str) -> dict[str, Any] | None:
    """json.loads confined to one place; None when text is not a strict JSON object."""
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None
