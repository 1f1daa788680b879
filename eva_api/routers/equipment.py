"""Equipment endpoints.

- GET    /api/v1/equipment  paginated list (search when ?search=)
- POST   /api/v1/equipment  create (201, 409 on duplicate code)
- GET    /api/v1/equipment/table  table view with column config
- GET    /api/v1/equipment/options  dropdown options
- GET    /api/v1/equipment/form  form schema (edit mode with ?equipment_id=)
- POST   /api/v1/equipment/batch  batch activate/deactivate
- POST   /api/v1/equipment/export  export descriptor or async export job
- GET    /api/v1/equipment/export/jobs/{job_id}  async export job status
- GET    /api/v1/equipment/{id}  detail
- GET    /api/v1/equipment/{id}/modal  detail rendered for a modal
- GET    /api/v1/equipment/{id}/manual  manual file descriptor
- PATCH  /api/v1/equipment/{id}/status  status change, broadcasts an event
- DELETE /api/v1/equipment/{id}  delete (204)
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from eva_api.dependencies import get_context, get_formatter
from eva_api.events.broadcaster import Broadcaster
from eva_api.events.equipment import EquipmentStatusChanged
from eva_api.formatter.variants import ReactViewFormatter
from eva_api.middleware.error_handler import NotFoundError
from eva_api.models.context import RequestContext
from eva_api.models.pagination import ListPaginator, PaginationParams
from eva_api.models.requests import (
    BatchRequest,
    EquipmentCreateRequest,
    ExportRequest,
    StatusChangeRequest,
)
from eva_api.routers.guards import require_capability
from eva_api.services.equipment_store import SERVICES, EquipmentStatus, EquipmentStore

logger = logging.getLogger(__name__)

TABLE_COLUMNS: list[Any] = [
    "code",
    "name",
    "brand",
    "model",
    {"key": "service", "label": "Servicio", "sortable": False},
    {"key": "status", "type": "badge"},
    "fecha_ingreso",
    "costo",
    "active",
]

FORM_FIELDS: list[Any] = [
    {"name": "code", "label": "Código", "required": True},
    {"name": "name", "label": "Nombre", "required": True},
    {"name": "brand", "label": "Marca", "required": True},
    {"name": "model", "label": "Modelo", "required": True},
    {
        "name": "service_id",
        "label": "Servicio",
        "type": "select",
        "required": True,
        "options": [{"value": k, "label": v} for k, v in SERVICES.items()],
    },
    {"name": "area_id", "label": "Área", "type": "number", "required": True},
    {
        "name": "status",
        "label": "Estado",
        "type": "select",
        "options": [{"value": s.value, "label": s.value} for s in EquipmentStatus],
    },
    {"name": "fecha_ingreso", "label": "Fecha de ingreso", "type": "date"},
    {"name": "costo", "label": "Costo", "type": "number"},
]


def create_equipment_router(
    *,
    store: EquipmentStore,
    broadcaster: Broadcaster,
    default_per_page: int = 15,
    max_per_page: int = 100,
    max_export_jobs: int = 100,
) -> APIRouter:
    """Factory that creates the equipment router with injected dependencies."""

    router = APIRouter(prefix="/api/v1/equipment", tags=["equipment"])
    # Oldest job is evicted once max_export_jobs are held
    export_jobs: OrderedDict[str, dict[str, Any]] = OrderedDict()

    def _row(record: Any) -> dict[str, Any]:
        row = record.to_dict()
        row["service"] = SERVICES.get(record.service_id)
        return row

    def _filtered(request: Request, search: str | None) -> list[dict[str, Any]]:
        params = request.query_params
        filters = {
            "service_id": params.get("service_id"),
            "status": params.get("status"),
            "area_id": params.get("area_id"),
        }
        filters = {
            k: (int(v) if k.endswith("_id") and v and v.isdigit() else v)
            for k, v in filters.items()
        }
        rows = store.search(
            search,
            filters,
            sort_by=params.get("sort_by", "id"),
            sort_direction=params.get("sort_direction", "desc"),
        )
        return [_row(r) for r in rows]

    def _paginator(request: Request, rows: list[dict[str, Any]]) -> ListPaginator:
        page = PaginationParams.from_query(
            request.query_params.get("page"),
            request.query_params.get("per_page"),
            default_per_page=default_per_page,
            max_per_page=max_per_page,
        )
        return ListPaginator(
            rows, page=page.page, per_page=page.per_page, base_url=str(request.url.path)
        )

    @router.get("")
    async def list_equipment(
        request: Request,
        search: str | None = None,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        """Paginated list; a search term switches to the search envelope."""
        paginator = _paginator(request, _filtered(request, search))
        if search:
            filters = {
                k: v
                for k, v in request.query_params.items()
                if k in ("service_id", "status", "area_id")
            }
            return formatter.search(paginator, search, filters, ctx=ctx)
        return formatter.paginated(paginator, "Equipment retrieved", ctx=ctx)

    @router.post("")
    async def create_equipment(
        request: Request,
        body: EquipmentCreateRequest,
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        ctx = require_capability(request, "can_create")
        record = store.create(body.model_dump())
        return formatter.created(_row(record), "Equipment created", ctx=ctx)

    @router.get("/table")
    async def equipment_table(
        request: Request,
        search: str | None = None,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        permissions = request.app.state.permissions.for_principal(ctx.principal)
        actions = ["view"]
        actions += [
            name
            for name, capability in (("edit", "can_edit"), ("delete", "can_delete"))
            if permissions.get(capability)
        ]
        return formatter.table(
            _paginator(request, _filtered(request, search)),
            TABLE_COLUMNS,
            "Equipment table retrieved",
            actions=actions,
            filters={
                "service_id": [{"value": k, "label": v} for k, v in SERVICES.items()],
                "status": [s.value for s in EquipmentStatus],
            },
            ctx=ctx,
        )

    @router.get("/options")
    async def equipment_options(
        service_id: int | None = None,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        records = store.search(
            filters={"service_id": service_id, "active": True},
            sort_by="code",
            sort_direction="asc",
        )
        options = [
            {"value": r.id, "label": f"{r.code} - {r.name}", "status": r.status.value}
            for r in records
        ]
        return formatter.dropdown(options, "Equipment options retrieved", ctx=ctx)

    @router.get("/form")
    async def equipment_form(
        equipment_id: int | None = None,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        if equipment_id is None:
            return formatter.form(
                FORM_FIELDS, submit_url="/api/v1/equipment", method="POST", ctx=ctx
            )
        record = store.get(equipment_id)
        return formatter.form(
            FORM_FIELDS,
            _row(record),
            submit_url=f"/api/v1/equipment/{equipment_id}",
            method="PUT",
            mode="edit",
            ctx=ctx,
        )

    @router.post("/batch")
    async def batch_equipment(
        request: Request,
        body: BatchRequest,
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        ctx = require_capability(request, "can_edit")
        results = store.set_active(body.ids, body.operation == "activate")
        return formatter.batch(results, body.operation, ctx=ctx)

    @router.post("/export")
    async def export_equipment(
        request: Request,
        body: ExportRequest,
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        ctx = require_capability(request, "can_export")
        rows = store.search(body.search)
        filename = f"equipos_{uuid.uuid4().hex[:8]}.{body.format}"
        descriptor = {
            "filename": filename,
            "format": body.format,
            "records_count": len(rows),
            "url": f"/exports/{filename}",
        }
        if body.run_async:
            job_id = str(uuid.uuid4())
            # Exports are generated inline; the job is complete once recorded.
            export_jobs[job_id] = {"state": "completed", "progress": 100, "result": descriptor}
            while len(export_jobs) > max_export_jobs:
                evicted, _ = export_jobs.popitem(last=False)
                logger.debug("Evicted export job %s", evicted)
            logger.info(
                "Export job %s recorded (%d rows, %s)",
                job_id,
                len(rows),
                body.format,
                extra={"request_id": ctx.request_id},
            )
            return formatter.async_job(
                job_id,
                "Export started",
                status_url=f"/api/v1/equipment/export/jobs/{job_id}",
                estimated_seconds=max(1, len(rows) // 100),
                ctx=ctx,
            )
        return formatter.export(
            filename, body.format, len(rows), url=descriptor["url"], ctx=ctx
        )

    @router.get("/export/jobs/{job_id}")
    async def export_job_status(
        job_id: str,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        job = export_jobs.get(job_id)
        if job is None:
            raise NotFoundError(f"Export job {job_id} not found")
        return formatter.job_status(
            job_id, job["state"], job["progress"], job["result"], ctx=ctx
        )

    @router.get("/{equipment_id}")
    async def get_equipment(
        equipment_id: int,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        return formatter.success(_row(store.get(equipment_id)), "Equipment retrieved", ctx=ctx)

    @router.get("/{equipment_id}/modal")
    async def equipment_modal(
        equipment_id: int,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        record = store.get(equipment_id)
        return formatter.modal(
            _row(record),
            title=f"{record.code} - {record.name}",
            size="lg",
            actions=["close"],
            ctx=ctx,
        )

    @router.get("/{equipment_id}/manual")
    async def equipment_manual(
        equipment_id: int,
        ctx: RequestContext = Depends(get_context),
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        record = store.get(equipment_id)
        if not record.manual:
            raise NotFoundError(f"Equipment {equipment_id} has no manual")
        return formatter.file(
            record.manual["name"],
            record.manual["size_bytes"],
            "Manual retrieved",
            mime_type=record.manual.get("mime_type"),
            url=f"/files/manuals/{record.manual['name']}",
            ctx=ctx,
        )

    @router.patch("/{equipment_id}/status")
    async def change_status(
        request: Request,
        equipment_id: int,
        body: StatusChangeRequest,
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> JSONResponse:
        ctx = require_capability(request, "can_edit")
        record, previous = store.update_status(equipment_id, body.status)
        if previous != record.status:
            broadcaster.publish(
                EquipmentStatusChanged(_row(record), previous.value, record.status.value, ctx)
            )
        return formatter.success(_row(record), "Equipment status updated", ctx=ctx)

    @router.delete("/{equipment_id}")
    async def delete_equipment(
        request: Request,
        equipment_id: int,
        formatter: ReactViewFormatter = Depends(get_formatter),
    ) -> Response:
        ctx = require_capability(request, "can_delete")
        store.delete(equipment_id)
        return formatter.no_content(ctx=ctx)

    return router
