"""In-process broadcaster.

Logs every published event and keeps the most recent ones in memory, which
is what the realtime gateway polls and what tests inspect.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from eva_api.events.base import BroadcastEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedEvent:
    name: str
    channels: tuple[str, ...]
    payload: dict[str, Any]
    priority: str


class Broadcaster:
    """Publishes events; keeps the last ``history_size`` of them."""

    def __init__(self, history_size: int = 100) -> None:
        self._history: deque[PublishedEvent] = deque(maxlen=history_size)

    def publish(self, event: BroadcastEvent) -> PublishedEvent:
        published = PublishedEvent(
            name=event.broadcast_as(),
            channels=tuple(channel.qualified_name for channel in event.broadcast_on()),
            payload=event.broadcast_with(),
            priority=event.priority,
        )
        self._history.append(published)
        logger.info(
            "Broadcast %s",
            published.name,
            extra={
                "event_type": event.event_type,
                "channels": list(published.channels),
                "request_id": event.metadata.get("request_id"),
            },
        )
        return published

    def history(self) -> list[PublishedEvent]:
        return list(self._history)
