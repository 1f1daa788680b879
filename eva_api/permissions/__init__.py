"""Permission snapshots and the TTL cache backing them."""

from eva_api.permissions.cache import TTLCache
from eva_api.permissions.resolver import PermissionResolver, PermissionSnapshot

__all__ = ["PermissionResolver", "PermissionSnapshot", "TTLCache"]
