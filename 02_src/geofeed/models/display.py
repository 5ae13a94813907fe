"""Client-side display data models."""

from dataclasses import dataclass
from datetime import datetime

# Colors used by the globe for arcs and rings
ERROR_COLOR = "#ff4136"
POST_COLOR = "#ffdc00"
GET_COLOR = "#62daff"
DEFAULT_COLOR = "#01ff70"


@dataclass(frozen=True)
class Arc:
    """An arc from an event origin to the server."""

    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    color: str
    altitude: float
    size: float = 0.3


@dataclass(frozen=True)
class Point:
    """A ring marker at the event origin."""

    lat: float
    lng: float
    color: str
    size: float = 0.5


@dataclass(frozen=True)
class DisplayEntry:
    """One rendered event: arc, point and the tooltip fields."""

    arc: Arc
    point: Point
    ip: str
    country: str
    city: str | None
    method: str
    path: str
    status_code: int | None
    occurred_at: datetime
