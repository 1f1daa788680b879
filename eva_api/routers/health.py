"""Health endpoint. Does NOT require the service key."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from eva_api.dependencies import get_context, get_formatter
from eva_api.formatter.variants import ReactViewFormatter
from eva_api.models.context import RequestContext


def create_health_router(*, version: str) -> APIRouter:
    """Factory that creates the health router."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health(
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        return formatter.success(
            {"status": "healthy", "version": version}, "Service healthy", ctx=ctx
        )

    return health_router
