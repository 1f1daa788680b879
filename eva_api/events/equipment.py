"""Equipment status change event."""

from __future__ import annotations

from typing import Any, Mapping

from eva_api.events.base import BroadcastEvent, Channel
from eva_api.models.context import Clock, RequestContext, utc_now


class EquipmentStatusChanged(BroadcastEvent):
    """Emitted when a piece of equipment moves between statuses."""

    category = "equipment"

    def __init__(
        self,
        equipment: Mapping[str, Any],
        previous_status: str,
        new_status: str,
        ctx: RequestContext | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(ctx, clock=clock)
        self.equipment = dict(equipment)
        self.previous_status = previous_status
        self.new_status = new_status

    @property
    def event_type(self) -> str:
        return "equipment.status_changed"

    @property
    def priority(self) -> str:
        # Equipment going out of service affects patient care
        return "high" if self.new_status in ("out_of_service", "fuera_de_servicio") else "normal"

    def broadcast_as(self) -> str:
        return "equipment.status.changed"

    def broadcast_on(self) -> list[Channel]:
        return [
            Channel(f"equipment.{self.equipment.get('id')}", private=True),
            Channel(f"service.{self.equipment.get('service_id')}", private=True),
            Channel("equipment-updates"),
        ]

    def event_data(self) -> dict[str, Any]:
        return {
            "equipment_id": self.equipment.get("id"),
            "equipment_code": self.equipment.get("code"),
            "equipment_name": self.equipment.get("name"),
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "service_id": self.equipment.get("service_id"),
            "area_id": self.equipment.get("area_id"),
        }

    def broadcast_with(self) -> dict[str, Any]:
        changed_by = None
        if self.user is not None:
            changed_by = {"id": self.user.id, "name": self.user.name}
        return {**self.event_data(), "changed_by": changed_by, "timestamp": self.timestamp}
