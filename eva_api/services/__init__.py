"""Domain services backing the demo routers."""

from eva_api.services.equipment_store import (
    EquipmentRecord,
    EquipmentStatus,
    EquipmentStore,
)

__all__ = ["EquipmentRecord", "EquipmentStatus", "EquipmentStore"]
