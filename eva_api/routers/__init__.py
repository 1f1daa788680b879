"""HTTP routers."""

from eva_api.routers.dashboard import create_dashboard_router
from eva_api.routers.equipment import create_equipment_router
from eva_api.routers.health import create_health_router

__all__ = [
    "create_dashboard_router",
    "create_equipment_router",
    "create_health_router",
]
