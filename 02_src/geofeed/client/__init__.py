"""Viewer-side consumption of the event stream."""

from .queue import ClientEventQueue, event_color
from .viewer import ViewerClient

__all__ = ["ClientEventQueue", "ViewerClient", "event_color"]
