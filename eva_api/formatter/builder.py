"""Envelope builder.

``ResponseFormatter`` turns a payload (or an error description) into a
``JSONResponse`` whose body is a success or error envelope. Every response
is logged through the response sink before it is returned.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from fastapi.responses import JSONResponse
from starlette.responses import Response

from eva_api.formatter.helpers import format_validation_errors
from eva_api.formatter.log_sink import ResponseLogSink
from eva_api.formatter.metadata import MetadataResolver
from eva_api.models.context import Clock, RequestContext, isoformat, utc_now
from eva_api.models.envelope import EnvelopeStatus, ErrorEnvelope, SuccessEnvelope

_STATUS_BY_CODE: dict[int, EnvelopeStatus] = {
    401: EnvelopeStatus.UNAUTHORIZED,
    403: EnvelopeStatus.FORBIDDEN,
    404: EnvelopeStatus.NOT_FOUND,
    409: EnvelopeStatus.CONFLICT,
    422: EnvelopeStatus.VALIDATION_ERROR,
    429: EnvelopeStatus.TOO_MANY_REQUESTS,
}


def status_for_code(status_code: int) -> EnvelopeStatus:
    """Default taxonomy tag for an error HTTP status."""
    if status_code >= 500:
        return EnvelopeStatus.SERVER_ERROR
    return _STATUS_BY_CODE.get(status_code, EnvelopeStatus.ERROR)


class ResponseFormatter:
    """Builds envelopes and wraps them in JSON responses.

    Args:
        metadata: Resolves the ambient metadata for a request context.
        sink: Response log sink; defaults to the formatter-level sink.
        clock: Source of the envelope ``timestamp``.
    """

    def __init__(
        self,
        metadata: MetadataResolver,
        sink: ResponseLogSink | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._metadata = metadata
        self._sink = sink or ResponseLogSink()
        self._clock = clock

    def with_sink(self, sink: ResponseLogSink) -> ResponseFormatter:
        """Same formatter, logging through ``sink`` instead."""
        rebound = copy.copy(self)
        rebound._sink = sink
        return rebound

    # -- envelope construction ---------------------------------------------

    def _merged_metadata(
        self, ctx: RequestContext | None, overrides: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        merged = self._metadata.resolve(ctx)
        if overrides:
            merged.update(overrides)
        return merged

    def build_success(
        self,
        data: Any = None,
        message: str = "Operation successful",
        *,
        status: EnvelopeStatus = EnvelopeStatus.SUCCESS,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> SuccessEnvelope[Any]:
        return SuccessEnvelope[Any](
            status=status,
            message=message,
            data=data,
            timestamp=isoformat(self._clock()),
            metadata=self._merged_metadata(ctx, metadata),
        )

    def build_error(
        self,
        message: str = "An error occurred",
        errors: Any = None,
        *,
        status: EnvelopeStatus = EnvelopeStatus.ERROR,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> ErrorEnvelope[Any]:
        return ErrorEnvelope[Any](
            status=status,
            message=message,
            errors=errors,
            timestamp=isoformat(self._clock()),
            metadata=self._merged_metadata(ctx, metadata),
        )

    def _respond(
        self,
        envelope: SuccessEnvelope[Any] | ErrorEnvelope[Any],
        status_code: int,
        response_type: str,
        ctx: RequestContext | None,
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        self._sink.record(response_type, envelope.message, status_code, ctx)
        return JSONResponse(
            status_code=status_code,
            content=envelope.model_dump(mode="json"),
            headers=dict(headers) if headers else None,
        )

    # -- success paths -----------------------------------------------------

    def success(
        self,
        data: Any = None,
        message: str = "Operation successful",
        status_code: int = 200,
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
        status: EnvelopeStatus = EnvelopeStatus.SUCCESS,
        response_type: str = "success",
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        envelope = self.build_success(
            data, message, status=status, metadata=metadata, ctx=ctx
        )
        return self._respond(envelope, status_code, response_type, ctx, headers)

    def created(
        self,
        data: Any = None,
        message: str = "Resource created successfully",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.success(
            data, message, 201, metadata=metadata, ctx=ctx, response_type="created"
        )

    def accepted(
        self,
        data: Any = None,
        message: str = "Processing started",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.success(
            data,
            message,
            202,
            metadata=metadata,
            ctx=ctx,
            status=EnvelopeStatus.ASYNC_STARTED,
            response_type="async_started",
        )

    def no_content(self, *, ctx: RequestContext | None = None) -> Response:
        """204 carries no body, so no envelope is serialized."""
        self._sink.record("no_content", "No content", 204, ctx)
        return Response(status_code=204)

    # -- error paths -------------------------------------------------------

    def error(
        self,
        message: str = "An error occurred",
        status_code: int = 400,
        errors: Any = None,
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
        status: EnvelopeStatus | None = None,
        response_type: str = "error",
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        envelope = self.build_error(
            message,
            errors,
            status=status or status_for_code(status_code),
            metadata=metadata,
            ctx=ctx,
        )
        return self._respond(envelope, status_code, response_type, ctx, headers)

    def validation(
        self,
        errors: Any,
        message: str = "Validation failed",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message,
            422,
            format_validation_errors(errors),
            metadata=metadata,
            ctx=ctx,
            status=EnvelopeStatus.VALIDATION_ERROR,
            response_type="validation_error",
        )

    def not_found(
        self,
        message: str = "Resource not found",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message, 404, metadata=metadata, ctx=ctx, response_type="not_found"
        )

    def unauthorized(
        self,
        message: str = "Unauthorized",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message, 401, metadata=metadata, ctx=ctx, response_type="unauthorized"
        )

    def forbidden(
        self,
        message: str = "Forbidden",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message, 403, metadata=metadata, ctx=ctx, response_type="forbidden"
        )

    def conflict(
        self,
        message: str = "Resource conflict",
        errors: Any = None,
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message, 409, errors, metadata=metadata, ctx=ctx, response_type="conflict"
        )

    def too_many_requests(
        self,
        retry_after: int = 60,
        message: str = "Too many requests",
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message,
            429,
            {"retry_after": retry_after},
            metadata=metadata,
            ctx=ctx,
            response_type="too_many_requests",
            headers={"Retry-After": str(retry_after)},
        )

    def server_error(
        self,
        message: str = "Internal server error",
        errors: Any = None,
        *,
        metadata: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.error(
            message, 500, errors, metadata=metadata, ctx=ctx, response_type="server_error"
        )
