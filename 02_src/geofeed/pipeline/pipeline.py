"""IngestionPipeline: resolve, store and broadcast RawEvents."""

import asyncio
from typing import Protocol

from ..broadcast import IBroadcastHub
from ..geo import IGeoResolver
from ..logging_config import get_logger
from ..models import EnrichedEvent, RawEvent
from ..sources import IEventSource
from ..store import IEventStore

logger = get_logger(__name__)


class IIngestionPipeline(Protocol):
    """Turns RawEvents from any source into stored, broadcast events."""

    async def ingest(self, raw: RawEvent) -> EnrichedEvent | None:
        """Enrich raw; store and publish it unless it cannot be located."""
        ...


class IngestionPipeline:
    """Composes GeoResolver, EventStore and BroadcastHub.

    Geolocation runs outside the lock. Append and publish run together under
    one lock, so every subscriber sees events in history order no matter
    which source produced them.
    """

    def __init__(
        self,
        resolver: IGeoResolver,
        store: IEventStore,
        hub: IBroadcastHub,
    ):
        self._resolver = resolver
        self._store = store
        self._hub = hub
        self._lock = asyncio.Lock()
        self._sources: list[IEventSource] = []
        self.accepted = 0
        self.dropped = 0

    def attach(self, source: IEventSource) -> None:
        """Register a source to be started with the pipeline."""
        self._sources.append(source)

    async def start(self) -> None:
        """Start all attached sources with this pipeline as their sink."""
        for source in self._sources:
            await source.start(self.ingest)
            logger.info("Source %s started", source.name)

    async def stop(self) -> None:
        """Stop sources in reverse order."""
        for source in reversed(self._sources):
            await source.stop()
            logger.info("Source %s stopped", source.name)

    async def ingest(self, raw: RawEvent) -> EnrichedEvent | None:
        """Enrich raw; store and publish it unless it cannot be located."""
        location = self._resolver.resolve(raw.source_ip)
        if location is None:
            self.dropped += 1
            logger.debug("Dropping %s event from unresolvable %s", raw.source.value, raw.source_ip)
            return None

        event = EnrichedEvent.from_raw(raw, location)
        async with self._lock:
            self._store.append(event)
            self._hub.publish(event)
        self.accepted += 1

        logger.info(
            "%s %s %s from %s (%s)",
            raw.source.value,
            event.method,
            event.path,
            event.source_ip,
            event.country_code,
        )
        return event
