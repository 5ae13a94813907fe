"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .broadcast import BroadcastHub
from .config import Settings
from .geo import GeoResolver, IGeoResolver
from .logging_config import get_logger
from .models import ServerLocation
from .pipeline import IngestionPipeline
from .sources import LogSourceReader, RequestObserver
from .store import EventStore

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        resolver: IGeoResolver | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._server_location = ServerLocation(
            latitude=self._settings.server_lat,
            longitude=self._settings.server_lng,
            label=self._settings.server_label,
        )
        self._custom_resolver = resolver

        # The middleware is installed before startup, so the observer exists early
        self._request_observer = RequestObserver(stream_path=self._settings.stream_path)

        # Components (will be initialized in start())
        self._resolver: IGeoResolver | None = None
        self._store: EventStore | None = None
        self._hub: BroadcastHub | None = None
        self._pipeline: IngestionPipeline | None = None
        self._log_reader: LogSourceReader | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. GeoResolver (no dependencies)
        if self._custom_resolver is not None:
            self._resolver = self._custom_resolver
        else:
            geo = GeoResolver(self._settings.geoip_db_path)
            geo.open()
            self._resolver = geo

        # 2. EventStore (no dependencies)
        self._store = EventStore(self._settings.history_capacity)

        # 3. BroadcastHub (reads EventStore snapshots)
        self._hub = BroadcastHub(self._store, queue_size=self._settings.subscriber_queue_size)

        # 4. IngestionPipeline (Resolver + Store + Hub)
        self._pipeline = IngestionPipeline(self._resolver, self._store, self._hub)

        # 5. Sources feed the pipeline
        self._log_reader = LogSourceReader(
            self._settings.log_paths,
            poll_interval=self._settings.log_poll_interval,
        )
        self._pipeline.attach(self._request_observer)
        self._pipeline.attach(self._log_reader)
        await self._pipeline.start()

        logger.info(
            "All components initialized (history capacity %d, server at %s)",
            self._store.capacity,
            self._server_location.label or "unnamed",
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._pipeline:
            await self._pipeline.stop()
        if self._hub:
            await self._hub.close()
            logger.info("All subscribers disconnected")
        if isinstance(self._resolver, GeoResolver):
            self._resolver.close()
        logger.info("Application stopped")

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def server_location(self) -> ServerLocation:
        return self._server_location

    @property
    def request_observer(self) -> RequestObserver:
        return self._request_observer

    @property
    def store(self) -> EventStore:
        """Get event store instance."""
        if self._store is None:
            raise RuntimeError("Application not started")
        return self._store

    @property
    def hub(self) -> BroadcastHub:
        """Get broadcast hub instance."""
        if not self._hub:
            raise RuntimeError("Application not started")
        return self._hub

    @property
    def pipeline(self) -> IngestionPipeline:
        """Get ingestion pipeline instance."""
        if not self._pipeline:
            raise RuntimeError("Application not started")
        return self._pipeline

    @property
    def log_reader(self) -> LogSourceReader:
        """Get log source reader instance."""
        if not self._log_reader:
            raise RuntimeError("Application not started")
        return self._log_reader
