"""Capability checks against the caller's permission snapshot."""

from __future__ import annotations

from fastapi import Request

from eva_api.dependencies import get_context
from eva_api.middleware.error_handler import ForbiddenError, UnauthorizedError
from eva_api.models.context import RequestContext


def require_capability(request: Request, capability: str) -> RequestContext:
    """Return the context if the caller holds ``capability``, raise otherwise."""
    ctx = get_context(request)
    if ctx.principal is None:
        raise UnauthorizedError("Authentication required")
    snapshot = request.app.state.permissions.for_principal(ctx.principal)
    if not snapshot.get(capability):
        raise ForbiddenError(
            f"Role '{ctx.principal.role}' lacks permission '{capability}'"
        )
    return ctx
