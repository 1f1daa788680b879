"""Dashboard and notification endpoints.

- GET  /api/v1/dashboard      widgets, stats and charts over the equipment catalog
- POST /api/v1/notifications  echo a notification in the frontend's shape
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from eva_api.dependencies import get_context, get_formatter
from eva_api.formatter.variants import ReactViewFormatter
from eva_api.models.context import RequestContext
from eva_api.models.requests import NotificationRequest
from eva_api.services.equipment_store import EquipmentStore


def create_dashboard_router(*, store: EquipmentStore, refresh_interval: int = 60) -> APIRouter:
    """Factory that creates the dashboard router with injected dependencies."""

    router = APIRouter(prefix="/api/v1", tags=["dashboard"])

    @router.get("/dashboard")
    async def dashboard(
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        by_status = store.counts_by_status()
        total = len(store)
        stats = {
            "total_equipment": total,
            "operational": by_status["operational"],
            "in_maintenance": by_status["maintenance"],
            "out_of_service": by_status["out_of_service"],
            "availability_rate": round(by_status["operational"] / total * 100, 2) if total else 0,
        }
        widgets = [
            {"id": "total", "type": "counter", "title": "Equipos", "value": total},
            {
                "id": "maintenance",
                "type": "counter",
                "title": "En mantenimiento",
                "value": by_status["maintenance"],
            },
            {
                "id": "availability",
                "type": "gauge",
                "title": "Disponibilidad",
                "value": stats["availability_rate"],
            },
        ]
        by_service = store.counts_by_service()
        charts = {
            "by_status": {
                "type": "pie",
                "labels": list(by_status),
                "values": list(by_status.values()),
            },
            "by_service": {
                "type": "bar",
                "labels": list(by_service),
                "values": list(by_service.values()),
            },
        }
        return formatter.dashboard(
            widgets, stats, charts, refresh_interval=refresh_interval, ctx=ctx
        )

    @router.post("/notifications")
    async def create_notification(
        body: NotificationRequest,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        return formatter.notification(
            body.message,
            type=body.type,
            title=body.title,
            persistent=body.persistent,
            ctx=ctx,
        )

    return router
