"""Broadcast event payloads.

An event knows its broadcast name, the channels it goes out on and the
payload it carries. Delivery belongs to a ``Broadcaster``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from eva_api.models.context import ANONYMOUS, Clock, Principal, RequestContext, isoformat, utc_now


@dataclass(frozen=True)
class Channel:
    """A broadcast channel; private channels carry the ``private-`` prefix."""

    name: str
    private: bool = False

    @property
    def qualified_name(self) -> str:
        return f"private-{self.name}" if self.private else self.name


class BroadcastEvent(ABC):
    """Base for events pushed to the frontend over websockets."""

    category: str = "general"

    def __init__(
        self,
        ctx: RequestContext | None = None,
        metadata: Mapping[str, Any] | None = None,
        clock: Clock = utc_now,
    ) -> None:
        ctx = ctx or ANONYMOUS
        self.user: Principal | None = ctx.principal
        self.timestamp = isoformat(clock())
        self.metadata: dict[str, Any] = {
            "ip": ctx.ip,
            "user_agent": ctx.user_agent,
            "request_id": ctx.request_id,
            **(metadata or {}),
        }

    @property
    @abstractmethod
    def event_type(self) -> str:
        """Identifier such as ``ticket.created``."""

    @abstractmethod
    def event_data(self) -> dict[str, Any]:
        """Event-specific part of the payload."""

    @property
    def priority(self) -> str:
        return "normal"

    def broadcast_as(self) -> str:
        return f"eva.{self.event_type}"

    def broadcast_on(self) -> list[Channel]:
        user_key = self.user.id if self.user else "guest"
        return [
            Channel(f"user.{user_key}", private=True),
            Channel("system.events", private=True),
        ]

    def _user_summary(self) -> dict[str, Any] | None:
        if self.user is None:
            return None
        return {"id": self.user.id, "name": self.user.name, "role": self.user.role}

    def broadcast_with(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "user": self._user_summary(),
            "timestamp": self.timestamp,
            "metadata": self.metadata,
            "data": self.event_data(),
        }
