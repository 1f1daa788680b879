"""Global error hierarchy and FastAPI exception handlers.

All EVA errors extend EvaError. The FastAPI exception handlers catch these
errors (plus Starlette HTTP errors, Pydantic's RequestValidationError and
unhandled exceptions) and render them as error envelopes through the
application's ResponseFormatter.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eva_api.dependencies import get_context, get_formatter
from eva_api.formatter.builder import ResponseFormatter
from eva_api.formatter.log_sink import CONTROLLER_ESCALATION, ResponseLogSink
from eva_api.models.envelope import EnvelopeStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class EvaError(Exception):
    """Base error for all EVA API errors."""

    status_code: int = 500
    status: EnvelopeStatus = EnvelopeStatus.SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, errors: Any = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.errors = errors
        self.details = kwargs
        super().__init__(self.message)

    @property
    def payload(self) -> Any:
        """Envelope ``errors`` slot: explicit errors, else keyword details."""
        if self.errors is not None:
            return self.errors
        return self.details or None


class BadRequestError(EvaError):
    """Malformed request that is not a field-level validation failure."""

    status_code = 400
    status = EnvelopeStatus.ERROR
    message = "Bad request"


class ValidationError(EvaError):
    """Payload validation failures with field-level details."""

    status_code = 422
    status = EnvelopeStatus.VALIDATION_ERROR
    message = "Validation failed"


class UnauthorizedError(EvaError):
    """Missing or invalid credentials."""

    status_code = 401
    status = EnvelopeStatus.UNAUTHORIZED
    message = "Unauthorized"


class ForbiddenError(EvaError):
    """Authenticated but lacking the capability."""

    status_code = 403
    status = EnvelopeStatus.FORBIDDEN
    message = "Forbidden"


class NotFoundError(EvaError):
    """Resource not found."""

    status_code = 404
    status = EnvelopeStatus.NOT_FOUND
    message = "Resource not found"


class ConflictError(EvaError):
    """State conflict, e.g. duplicate code or stale update."""

    status_code = 409
    status = EnvelopeStatus.CONFLICT
    message = "Resource conflict"


class TooManyRequestsError(EvaError):
    """Rate limit exceeded."""

    status_code = 429
    status = EnvelopeStatus.TOO_MANY_REQUESTS
    message = "Too many requests"

    def __init__(self, message: str | None = None, retry_after: int = 60, **kwargs: object) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(EvaError):
    """Explicit server-side failure."""


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def register_error_handlers(
    app: FastAPI,
    *,
    production: bool = False,
    sink: ResponseLogSink | None = None,
) -> None:
    """Wire up all exception handlers on the FastAPI application.

    The formatter is looked up on ``app.state.formatter`` at request time and
    rebound to the controller-level sink, so each error response is logged
    once, escalating only at 500.
    """
    controller_sink = sink or ResponseLogSink(
        logging.getLogger("eva_api.controller"), escalate_at=CONTROLLER_ESCALATION
    )

    def _formatter(request: Request) -> ResponseFormatter:
        return get_formatter(request).with_sink(controller_sink)

    async def _eva_error_handler(request: Request, exc: EvaError) -> JSONResponse:
        ctx = get_context(request)
        formatter = _formatter(request)

        if isinstance(exc, TooManyRequestsError):
            return formatter.too_many_requests(exc.retry_after, exc.message, ctx=ctx)
        if isinstance(exc, ValidationError):
            return formatter.validation(exc.payload, exc.message, ctx=ctx)
        return formatter.error(
            exc.message,
            exc.status_code,
            exc.payload,
            ctx=ctx,
            status=exc.status,
            response_type=exc.status.value,
        )

    async def _http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return _formatter(request).error(
            message,
            exc.status_code,
            ctx=get_context(request),
            response_type="http_error",
            headers=getattr(exc, "headers", None),
        )

    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _formatter(request).validation(exc.errors(), ctx=get_context(request))

    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log traceback, hide internals in production."""
        ctx = get_context(request)
        logger.error(
            "Unhandled exception: %s",
            exc,
            exc_info=exc,
            extra={"request_id": ctx.request_id, "endpoint": ctx.endpoint},
        )
        message = "Internal server error" if production else str(exc) or "Internal server error"
        return _formatter(request).server_error(message, ctx=ctx)

    app.add_exception_handler(EvaError, _eva_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
