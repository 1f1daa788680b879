"""Per-request envelope metadata.

Fixed keys: api_version, server_time, request_id, user_id, locale,
permissions. Callers may override any of them per response.
"""

from __future__ import annotations

import uuid
from typing import Any

from eva_api.config.settings import EvaSettings
from eva_api.models.context import ANONYMOUS, Clock, RequestContext, isoformat, utc_now
from eva_api.permissions.resolver import PermissionResolver


class MetadataResolver:
    """Derives the metadata bag for one request from an explicit context."""

    def __init__(
        self,
        settings: EvaSettings,
        permissions: PermissionResolver,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._permissions = permissions
        self._clock = clock

    def resolve(self, ctx: RequestContext | None = None) -> dict[str, Any]:
        ctx = ctx or ANONYMOUS
        return {
            "api_version": self._settings.api_version,
            "server_time": isoformat(self._clock()),
            # Middleware normally sets this; direct callers may not.
            "request_id": ctx.request_id or str(uuid.uuid4()),
            "user_id": ctx.user_id,
            "permissions": self._permissions.for_principal(ctx.principal),
            "locale": ctx.locale or self._settings.default_locale,
        }
