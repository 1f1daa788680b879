"""Pydantic request models for the equipment and notification endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from eva_api.services.equipment_store import EquipmentStatus


class EquipmentCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    service_id: int = Field(..., ge=1)
    area_id: int = Field(..., ge=1)
    status: EquipmentStatus = EquipmentStatus.OPERATIONAL
    fecha_ingreso: str = "2024-01-15"
    costo: float = Field(default=0.0, ge=0)


class StatusChangeRequest(BaseModel):
    status: EquipmentStatus


class BatchRequest(BaseModel):
    """Batch activation/deactivation of equipment (max 100 ids)."""

    ids: list[int] = Field(..., min_length=1, max_length=100)
    operation: Literal["activate", "deactivate"]


class ExportRequest(BaseModel):
    format: Literal["xlsx", "csv", "pdf"] = "xlsx"
    run_async: bool = False
    search: str | None = None


class NotificationRequest(BaseModel):
    message: str = Field(..., min_length=1)
    type: Literal["info", "success", "warning", "error"] = "info"
    title: str | None = None
    persistent: bool = False
