"""Request ID middleware.

Every request gets an id that ends up in ``metadata.request_id`` of the
envelope, in each response log entry and in the ``X-Request-ID`` header.
An incoming ``X-Request-ID`` is reused when it looks like a token; anything
else is replaced with a fresh UUID4 so client input never reaches the logs
verbatim.
"""

from __future__ import annotations

import re
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,128}")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse ``incoming`` when it is a safe token, otherwise mint a UUID4."""
    if incoming and _ACCEPTED_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign the request id before the context is built."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get("x-request-id"))
        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
