"""Error Hierarchy — typed, categorized exceptions for all TechTutor failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Content errors (ContentFormatError, ContentValidationError, ExternalContentError)
      are recovered locally by substituting fallback content, never surfaced to users
    - StorageError is fatal to the current request, never to the process
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with TutorError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: str | None = None
    topic_id: str | None = None
    backend: str | None = None
    debug_info: dict[str, Any] | None = None


class TutorError(Exception):
    """Base exception for all TechTutor errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "account_id": self.context.account_id,
                    "topic_id": self.context.topic_id,
                },
            }
        }


# ─── Content Errors (recovered by fallback) ─────────────────────

class ContentFormatError(TutorError):
    """No JSON object could be located or parsed in raw external text."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONTENT_FORMAT_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
        )


class ContentValidationError(TutorError):
    """Parsed external content broke the content contract at `field_path`."""
    def __init__(
        self, message: str, field_path: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{field_path}: {message}", "CONTENT_VALIDATION_ERROR",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context, 422,
        )
        self.field_path = field_path


class ExternalContentError(TutorError):
    """Content-generation service call failed (never retried)."""
    def __init__(
        self, message: str, api_error_type: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Content generation error ({api_error_type}): {message}",
            "EXTERNAL_CONTENT_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
        )
        self.api_error_type = api_error_type


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(TutorError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(TutorError):
    """Create would duplicate a unique resource."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageError(TutorError):
    """State store read/write or transaction failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
