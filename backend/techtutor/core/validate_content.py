"""Content Validation — all-or-nothing check of an ingested object against the contract.

Invariants:
    - Returns a GeneratedContent only if every field satisfies content_contract bounds
    - The first violation raises ContentValidationError naming its field path
    - No partial acceptance: repair belongs to normalize_content

Design Decisions:
    - Pydantic does the structural work; this module only turns its error list into
      one stable, human-readable path like "problemSets[0].passingScore"
"""

from typing import Any

from pydantic import ValidationError

from techtutor.core.errors import ContentValidationError
from techtutor.schemas.content_contract import GeneratedContent

ROOT_PATH = "$"


def validate_generated_content(payload: Any) -> GeneratedContent:
    """Validate `payload` (output of ingestion) against the content contract."""
    try:
        return GeneratedContent.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        raise ContentValidationError(first["msg"], format_field_path(first["loc"]))


def format_field_path(loc: tuple) -> str:
    """("problemSets", 0, "passingScore") -> "problemSets[0].passingScore"."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or ROOT_PATH
