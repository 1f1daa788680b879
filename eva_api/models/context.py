"""Explicit per-request context.

Identity, request id, locale and client details are carried in a
``RequestContext`` passed to the formatter instead of being read from
framework globals. Middleware builds one per request; tests build them
directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


@dataclass(frozen=True)
class Principal:
    """Authenticated user as seen by the response layer."""

    id: int | str
    role: str = "viewer"
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """Everything the envelope layer needs to know about the current request."""

    request_id: str | None = None
    principal: Principal | None = None
    ip: str | None = None
    user_agent: str | None = None
    endpoint: str | None = None
    method: str | None = None
    locale: str | None = None

    @property
    def user_id(self) -> int | str | None:
        return self.principal.id if self.principal else None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None


ANONYMOUS = RequestContext()
