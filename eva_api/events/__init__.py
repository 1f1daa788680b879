"""Broadcast events and the in-process broadcaster."""

from eva_api.events.base import BroadcastEvent, Channel
from eva_api.events.broadcaster import Broadcaster, PublishedEvent
from eva_api.events.equipment import EquipmentStatusChanged
from eva_api.events.ticket import TicketManaged

__all__ = [
    "BroadcastEvent",
    "Broadcaster",
    "Channel",
    "EquipmentStatusChanged",
    "PublishedEvent",
    "TicketManaged",
]
