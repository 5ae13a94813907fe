"""ClientEventQueue: buffers pushed events and drains them per frame."""

import random
from collections import deque
from typing import Any, Callable

from ..logging_config import get_logger
from ..models import Arc, DisplayEntry, EnrichedEvent, Point, ServerLocation
from ..models.display import DEFAULT_COLOR, ERROR_COLOR, GET_COLOR, POST_COLOR

logger = get_logger(__name__)


def event_color(event: EnrichedEvent) -> str:
    """Errors are red, otherwise POST yellow, GET blue, anything else green."""
    if event.status_code is not None and event.status_code >= 400:
        return ERROR_COLOR
    if event.method == "POST":
        return POST_COLOR
    if event.method == "GET":
        return GET_COLOR
    return DEFAULT_COLOR


class ClientEventQueue:
    """Decouples arrival rate from render rate.

    Messages are queued as they arrive; ``drain`` is called once per frame
    and moves everything queued into the bounded display set.
    """

    def __init__(
        self,
        server: ServerLocation,
        capacity: int = 100,
        rng: Callable[[], float] = random.random,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._server = server
        self._rng = rng
        self._pending: deque[EnrichedEvent] = deque()
        self._display: deque[DisplayEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._display.maxlen

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def display(self) -> list[DisplayEntry]:
        """Displayed entries, oldest first."""
        return list(self._display)

    def handle_message(self, message: dict[str, Any]) -> int:
        """Queue the events in one stream message; returns how many."""
        if message.get("type") == "init":
            # Full resync: whatever was shown before is superseded
            self._pending.clear()
            self._display.clear()
            # Snapshot arrives most recent first
            items = list(reversed(message.get("data") or []))
        else:
            items = [message]

        queued = 0
        for item in items:
            try:
                self._pending.append(EnrichedEvent.from_wire(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed stream event: %s", e)
                continue
            queued += 1
        return queued

    def drain(self) -> list[DisplayEntry]:
        """Move all queued events into the display set, FIFO."""
        added = []
        while self._pending:
            entry = self._to_entry(self._pending.popleft())
            self._display.append(entry)
            added.append(entry)
        return added

    def _to_entry(self, event: EnrichedEvent) -> DisplayEntry:
        color = event_color(event)
        return DisplayEntry(
            arc=Arc(
                start_lat=event.latitude,
                start_lng=event.longitude,
                end_lat=self._server.latitude,
                end_lng=self._server.longitude,
                color=color,
                altitude=self._rng() * 0.4 + 0.1,
            ),
            point=Point(lat=event.latitude, lng=event.longitude, color=color),
            ip=event.source_ip,
            country=event.country_code,
            city=event.city,
            method=event.method,
            path=event.path,
            status_code=event.status_code,
            occurred_at=event.occurred_at,
        )
