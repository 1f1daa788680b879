"""Shared test fixtures for the EVA API test suite."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from eva_api.config.settings import EvaSettings
from eva_api.formatter.log_sink import ResponseLogSink
from eva_api.formatter.metadata import MetadataResolver
from eva_api.formatter.variants import ReactViewFormatter
from eva_api.main import create_app
from eva_api.models.context import Principal, RequestContext
from eva_api.permissions.cache import TTLCache
from eva_api.permissions.resolver import PermissionResolver


# ---------------------------------------------------------------------------
# Keep the developer's EVA_* environment out of the tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("EVA_"):
            monkeypatch.delenv(key)


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------

class FakeClock:
    """Wall clock returning a fixed, manually advanced instant."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMonotonic:
    """Monotonic clock in seconds, advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


# ---------------------------------------------------------------------------
# Settings and components
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> EvaSettings:
    """Test settings with safe defaults."""
    return EvaSettings(production=False, service_key=None)


@pytest.fixture
def permissions(settings: EvaSettings, monotonic: FakeMonotonic) -> PermissionResolver:
    return PermissionResolver(TTLCache(settings.permission_cache_ttl_seconds, clock=monotonic))


@pytest.fixture
def formatter(
    settings: EvaSettings, permissions: PermissionResolver, clock: FakeClock
) -> ReactViewFormatter:
    return ReactViewFormatter(
        MetadataResolver(settings, permissions, clock),
        ResponseLogSink(),
        clock,
        auto_dismiss_ms=settings.notification_auto_dismiss_ms,
    )


@pytest.fixture
def admin() -> Principal:
    return Principal(id=7, role="admin", name="Ana Gómez")


@pytest.fixture
def ctx(admin: Principal) -> RequestContext:
    return RequestContext(
        request_id="req-123",
        principal=admin,
        ip="10.0.0.5",
        user_agent="pytest",
        endpoint="/api/v1/equipment",
        method="GET",
    )


@pytest.fixture
def app(settings: EvaSettings, clock: FakeClock, monotonic: FakeMonotonic) -> FastAPI:
    return create_app(settings, clock=clock, monotonic=monotonic)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


def user_headers(user_id: int, role: str) -> dict[str, str]:
    return {"X-User-ID": str(user_id), "X-User-Role": role, "X-User-Name": f"user-{user_id}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return user_headers(1, "admin")


@pytest.fixture
def supervisor_headers() -> dict[str, str]:
    return user_headers(2, "supervisor")


@pytest.fixture
def technician_headers() -> dict[str, str]:
    return user_headers(3, "technician")


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return user_headers(4, "viewer")
