"""geofeed: live geolocated request stream."""

from .app import Application, IApplication
from .broadcast import BroadcastHub, IBroadcastHub, SubscriberHandle
from .client import ClientEventQueue, ViewerClient
from .config import Settings
from .geo import GeoResolver, IGeoResolver
from .models import (
    Arc,
    DisplayEntry,
    EnrichedEvent,
    EventOrigin,
    Location,
    Point,
    RawEvent,
    ServerLocation,
)
from .pipeline import IIngestionPipeline, IngestionPipeline
from .sources import IEventSource, LogSourceReader, RequestObserver
from .store import EventStore, IEventStore

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "EventOrigin",
    "RawEvent",
    "Location",
    "ServerLocation",
    "EnrichedEvent",
    "Arc",
    "Point",
    "DisplayEntry",
    # Components
    "IGeoResolver",
    "GeoResolver",
    "IEventSource",
    "LogSourceReader",
    "RequestObserver",
    "IEventStore",
    "EventStore",
    "IBroadcastHub",
    "BroadcastHub",
    "SubscriberHandle",
    "IIngestionPipeline",
    "IngestionPipeline",
    # Viewer side
    "ClientEventQueue",
    "ViewerClient",
]
