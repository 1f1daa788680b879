"""Ticket lifecycle event (created, assigned, escalated, closed, ...)."""

from __future__ import annotations

from typing import Any, Mapping

from eva_api.events.base import BroadcastEvent, Channel
from eva_api.models.context import Clock, RequestContext, utc_now

URGENT_PRIORITIES = frozenset({"urgent", "urgente", "critical", "critica", "alta"})
_HIGH_PRIORITY_ACTIONS = frozenset({"created", "assigned", "status_changed", "reopened"})


class TicketManaged(BroadcastEvent):
    category = "ticket"

    def __init__(
        self,
        ticket: Mapping[str, Any],
        action: str,
        previous: Mapping[str, Any] | None = None,
        changes: Mapping[str, Any] | None = None,
        ctx: RequestContext | None = None,
        metadata: Mapping[str, Any] | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(ctx, metadata, clock)
        self.ticket = dict(ticket)
        self.action = action
        self.previous = dict(previous) if previous is not None else None
        self.changes = dict(changes or {})

    @property
    def event_type(self) -> str:
        return f"ticket.{self.action}"

    @property
    def is_urgent(self) -> bool:
        return str(self.ticket.get("priority", "")).lower() in URGENT_PRIORITIES

    @property
    def priority(self) -> str:
        if self.is_urgent or self.action == "escalated":
            return "critical"
        if self.action in _HIGH_PRIORITY_ACTIONS:
            return "high"
        return "normal"

    def notification_channels(self) -> list[str]:
        channels = ["database", "broadcast"]
        if self.is_urgent or self.action in ("created", "escalated", "overdue"):
            channels.append("mail")
        return channels

    def broadcast_on(self) -> list[Channel]:
        channels = super().broadcast_on() + [
            Channel("ticket.managed"),
            Channel(f"ticket.{self.ticket.get('id')}", private=True),
        ]
        for key in ("assigned_to", "created_by"):
            if self.ticket.get(key) is not None:
                channels.append(Channel(f"user.tickets.{self.ticket[key]}", private=True))
        if self.ticket.get("equipment_id") is not None:
            channels.append(
                Channel(f"equipment.{self.ticket['equipment_id']}.tickets", private=True)
            )
        return channels

    def event_data(self) -> dict[str, Any]:
        return {
            "ticket": self.ticket,
            "action": self.action,
            "changes": self.changes,
            "previous_data": self.previous,
            "action_performed_by": self._user_summary(),
        }
