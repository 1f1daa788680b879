"""Request-scoped helpers shared by middleware, handlers and routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from eva_api.models.context import Principal, RequestContext

if TYPE_CHECKING:
    from eva_api.formatter.variants import ReactViewFormatter


def _principal_from_headers(request: Request) -> Principal | None:
    raw_id = request.headers.get("x-user-id")
    if not raw_id:
        return None
    user_id: int | str = int(raw_id) if raw_id.isdigit() else raw_id
    return Principal(
        id=user_id,
        role=request.headers.get("x-user-role", "viewer"),
        name=request.headers.get("x-user-name"),
    )


def _locale_from_headers(request: Request) -> str | None:
    explicit = request.headers.get("x-locale")
    if explicit:
        return explicit
    accept = request.headers.get("accept-language")
    if not accept:
        return None
    first = accept.split(",")[0].split(";")[0].strip()
    return first.split("-")[0].lower() or None


def context_from_request(request: Request) -> RequestContext:
    """Build a context from the raw request and any request id already assigned."""
    return RequestContext(
        request_id=getattr(request.state, "request_id", None)
        or request.headers.get("x-request-id"),
        principal=_principal_from_headers(request),
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        endpoint=request.url.path,
        method=request.method,
        locale=_locale_from_headers(request),
    )


def get_context(request: Request) -> RequestContext:
    """FastAPI dependency: the context set by PrincipalMiddleware."""
    ctx = getattr(request.state, "context", None)
    if ctx is None:
        ctx = context_from_request(request)
        request.state.context = ctx
    return ctx


def get_formatter(request: Request) -> ReactViewFormatter:
    """FastAPI dependency: the application's formatter."""
    return request.app.state.formatter
