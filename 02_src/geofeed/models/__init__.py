"""Core data models for geofeed."""

from .display import Arc, DisplayEntry, Point
from .events import EnrichedEvent, EventOrigin, Location, RawEvent, ServerLocation

__all__ = [
    # Events
    "EventOrigin",
    "RawEvent",
    "Location",
    "ServerLocation",
    "EnrichedEvent",
    # Display
    "Arc",
    "Point",
    "DisplayEntry",
]
