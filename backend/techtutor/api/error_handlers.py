"""Error Handlers — global exception handlers for the TechTutor API.

Invariants:
    - Every error body has the TutorError.to_response() envelope:
      {"error": {code, message, category, severity, timestamp, context}}
    - TutorError → its own http_status (StorageError 503, ResourceNotFound 404, ...)
    - RequestValidationError → 400, details use the content-contract path
      format ("body.voiceSettings.rate", "body.choices[2]")
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (TutorError), validation (Pydantic), catch-all (Exception)
    - One envelope for all three so clients parse a single error shape
    - 5xx TutorErrors log at ERROR, 4xx at WARNING
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from techtutor.core.errors import (
    ErrorCategory, ErrorContext, ErrorSeverity, TutorError,
)
from techtutor.core.validate_content import format_field_path

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_tutor_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_tutor_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TutorError)
    async def tutor_error_handler(request: Request, exc: TutorError):
        """Handle all TechTutor domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"TutorError: {exc.message}",
            extra={
                "error_code": exc.code,
                "account_id": exc.context.account_id,
                "topic_id": exc.context.topic_id,
                "backend": exc.context.backend,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = [
            {
                "field": format_field_path(e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        logger.warning(
            f"Validation error on {request.url.path}: "
            f"{', '.join(d['field'] for d in details)}",
            extra={"error_code": "VALIDATION_ERROR"},
        )
        body = _envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR,
        )
        body["error"]["details"] = details
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR"},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(
                "INTERNAL_ERROR", "An unexpected error occurred",
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            ),
        )


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
) -> dict:
    """Error body for failures raised outside the TutorError hierarchy."""
    return TutorError(
        message, code, category, severity, ErrorContext(),
    ).to_response()
