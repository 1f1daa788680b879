"""FastAPI application entry point.

Wires settings, the permission cache, the metadata resolver, the formatter,
middleware, exception handlers and routers together. All shared components
live on ``app.state`` so handlers and dependencies can reach them.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from eva_api.config.role_policies import load_role_policies
from eva_api.config.settings import EvaSettings
from eva_api.events.broadcaster import Broadcaster
from eva_api.formatter.log_sink import FORMATTER_ESCALATION, ResponseLogSink
from eva_api.formatter.metadata import MetadataResolver
from eva_api.formatter.variants import ReactViewFormatter
from eva_api.logging_config import configure_logging
from eva_api.middleware.auth import PrincipalMiddleware
from eva_api.middleware.error_handler import register_error_handlers
from eva_api.middleware.request_id import RequestIdMiddleware
from eva_api.models.context import Clock, utc_now
from eva_api.permissions.cache import TTLCache
from eva_api.permissions.resolver import PermissionResolver
from eva_api.routers.dashboard import create_dashboard_router
from eva_api.routers.equipment import create_equipment_router
from eva_api.routers.health import create_health_router
from eva_api.services.equipment_store import EquipmentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: logging setup and startup/shutdown logs."""
    settings: EvaSettings = app.state.settings
    configure_logging(settings.log_level)
    logger.info(
        "Starting %s API v%s on port %d",
        settings.app_name,
        settings.api_version,
        settings.port,
    )

    yield

    logger.info("%s API shut down", settings.app_name)


def create_app(
    settings: EvaSettings | None = None,
    *,
    clock: Clock = utc_now,
    monotonic: Callable[[], float] = time.monotonic,
    store: EquipmentStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``clock`` drives envelope timestamps; ``monotonic`` drives the
    permission cache TTL. Both are injectable for tests.
    """
    settings = settings or EvaSettings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        version=settings.api_version,
        lifespan=lifespan,
    )

    permissions = PermissionResolver(
        TTLCache(
            settings.permission_cache_ttl_seconds,
            clock=monotonic,
            max_entries=settings.permission_cache_max_entries,
        ),
        load_role_policies(settings.role_policies_path),
    )
    formatter = ReactViewFormatter(
        MetadataResolver(settings, permissions, clock),
        ResponseLogSink(logging.getLogger("eva_api.responses"), FORMATTER_ESCALATION),
        clock,
        auto_dismiss_ms=settings.notification_auto_dismiss_ms,
    )
    store = store if store is not None else EquipmentStore()
    broadcaster = Broadcaster()

    app.state.settings = settings
    app.state.permissions = permissions
    app.state.formatter = formatter
    app.state.store = store
    app.state.broadcaster = broadcaster

    register_error_handlers(app, production=settings.production)

    # Starlette applies middleware in reverse order of add_middleware calls:
    # request id first, then principal/context.
    app.add_middleware(
        PrincipalMiddleware, formatter=formatter, service_key=settings.service_key
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(create_health_router(version=settings.api_version))
    app.include_router(
        create_equipment_router(
            store=store,
            broadcaster=broadcaster,
            default_per_page=settings.default_per_page,
            max_per_page=settings.max_per_page,
            max_export_jobs=settings.max_export_jobs,
        )
    )
    app.include_router(create_dashboard_router(store=store))

    return app


app = create_app()
