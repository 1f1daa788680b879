"""Per-user permission snapshots, cached by user id.

A snapshot is ``{can_create, can_edit, can_delete, can_export, role}``
derived from the principal's role policy. Snapshots live in a TTL cache
(5 minutes by default). A role change is only visible once the cached
snapshot expires.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from eva_api.config.role_policies import BUILTIN_POLICIES, RolePolicy
from eva_api.models.context import Principal
from eva_api.permissions.cache import TTLCache

logger = logging.getLogger(__name__)

PermissionSnapshot = dict[str, Any]


class PermissionResolver:
    """Resolve and cache permission snapshots for principals.

    Args:
        cache: TTL cache keyed by user id.
        policies: Role name to policy mapping; must contain "default".
        compute: Override for the snapshot computation.
    """

    def __init__(
        self,
        cache: TTLCache[Any, PermissionSnapshot],
        policies: dict[str, RolePolicy] | None = None,
        compute: Callable[[Principal], PermissionSnapshot] | None = None,
    ) -> None:
        self._cache = cache
        self._policies = policies if policies is not None else dict(BUILTIN_POLICIES)
        self._compute = compute or self._snapshot_from_policy

    def for_principal(self, principal: Principal | None) -> PermissionSnapshot:
        """Return the snapshot for ``principal``; anonymous callers get ``{}``."""
        if principal is None:
            return {}
        return self._cache.get_or_compute(principal.id, lambda: self._compute(principal))

    def _snapshot_from_policy(self, principal: Principal) -> PermissionSnapshot:
        policy = self._policies.get(principal.role)
        if policy is None:
            logger.debug("No policy for role '%s', using default", principal.role)
            policy = self._policies.get("default", RolePolicy())
        return {**policy.model_dump(), "role": principal.role}
