"""Error taxonomy for the ingestion pipeline.

None of these are fatal. Each is raised at the point of failure and caught
at the boundary of the component that owns it.
"""


class GeofeedError(Exception):
    """Base class for geofeed errors."""


class MalformedLogLine(GeofeedError):
    """An access-log line does not match the parse pattern."""

    def __init__(self, line: str):
        super().__init__(f"Unparseable log line: {line[:200]!r}")
        self.line = line


class SourceUnavailable(GeofeedError):
    """Log file is missing or failed with an I/O error."""


class SubscriberDeliveryFailure(GeofeedError):
    """A message could not be handed to a subscriber channel."""


class TransportLost(GeofeedError):
    """Viewer lost its connection to the stream."""
