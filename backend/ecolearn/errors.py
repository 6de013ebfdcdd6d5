from __future__ import annotations
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

log = structlog.get_logger()


class EcoLearnError(Exception):
    """Base class for domain errors. Carries the HTTP status it maps to."""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(EcoLearnError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFound(EcoLearnError):
    status_code = 404
    error_code = "NOT_FOUND"


class Conflict(EcoLearnError):
    # duplicate submissions surface as 400 to the web client; other duplicates pass 409
    status_code = 400
    error_code = "CONFLICT"


class InvalidState(EcoLearnError):
    status_code = 409
    error_code = "INVALID_STATE"


class UpstreamFailure(EcoLearnError):
    status_code = 500
    error_code = "UPSTREAM_FAILURE"


class AuthError(EcoLearnError):
    status_code = 401
    error_code = "AUTH_ERROR"


class RateLimited(EcoLearnError):
    status_code = 429
    error_code = "RATE_LIMITED"


async def _handle_domain_error(request: Request, exc: EcoLearnError) -> JSONResponse:
    event = "request_failed" if exc.status_code >= 500 else "request_rejected"
    log_fn = log.error if exc.status_code >= 500 else log.warning
    log_fn(
        event,
        error=exc.error_code,
        detail=exc.message,
        path=request.url.path,
        method=request.method,
        status=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EcoLearnError, _handle_domain_error)
