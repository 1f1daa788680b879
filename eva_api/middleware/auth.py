"""Principal middleware.

Builds the ``RequestContext`` for every request and stores it on
``request.state.context``. Identity comes from headers set by the upstream
gateway (``X-User-ID``, ``X-User-Role``, ``X-User-Name``).

When a service key is configured, every non-public request must also carry
a matching ``X-Service-Key`` header. Comparison uses ``hmac.compare_digest``.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from eva_api.dependencies import context_from_request
from eva_api.formatter.builder import ResponseFormatter

logger = logging.getLogger(__name__)

# Paths that do NOT require the service key.
_PUBLIC_PATHS: set[str] = {"/health", "/docs", "/openapi.json"}


class PrincipalMiddleware(BaseHTTPMiddleware):
    """Attach the request context and enforce the optional service key."""

    def __init__(
        self,
        app,  # noqa: ANN001
        formatter: ResponseFormatter,
        service_key: str | None = None,
    ) -> None:
        super().__init__(app)
        self._formatter = formatter
        self._service_key = service_key

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ctx = context_from_request(request)
        request.state.context = ctx

        if self._service_key and request.url.path not in _PUBLIC_PATHS:
            provided_key = request.headers.get("x-service-key")
            if not provided_key or not hmac.compare_digest(provided_key, self._service_key):
                reason = "missing_service_key" if not provided_key else "invalid_service_key"
                logger.warning(
                    "Rejected request without a valid X-Service-Key",
                    extra={
                        "event": "auth_failure",
                        "reason": reason,
                        "ip": ctx.ip,
                        "endpoint": ctx.endpoint,
                        "request_id": ctx.request_id,
                    },
                )
                return self._formatter.unauthorized(
                    "Invalid or missing service key", ctx=ctx
                )

        return await call_next(request)
