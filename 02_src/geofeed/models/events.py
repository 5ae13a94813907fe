"""Event data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventOrigin(str, Enum):
    """Which source produced a RawEvent."""

    REQUEST = "request"
    LOG = "log"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RawEvent:
    """An unenriched observation of a single request or log line."""

    source_ip: str
    method: str
    path: str
    status_code: int | None = None
    response_size: int | None = None
    occurred_at: datetime = field(default_factory=_utcnow)
    source: EventOrigin = EventOrigin.REQUEST


@dataclass(frozen=True)
class Location:
    """Result of a successful geolocation lookup."""

    latitude: float
    longitude: float
    country_code: str
    city: str | None = None


@dataclass(frozen=True)
class ServerLocation:
    """Fixed reference point of the serving node."""

    latitude: float
    longitude: float
    label: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {"lat": self.latitude, "lng": self.longitude, "label": self.label}


@dataclass(frozen=True)
class EnrichedEvent:
    """A RawEvent augmented with its geolocation."""

    source_ip: str
    method: str
    path: str
    latitude: float
    longitude: float
    country_code: str
    city: str | None
    occurred_at: datetime
    status_code: int | None = None
    response_size: int | None = None
    source: EventOrigin = EventOrigin.REQUEST

    @classmethod
    def from_raw(cls, raw: RawEvent, location: Location) -> "EnrichedEvent":
        """Combine a RawEvent with its resolved location."""
        return cls(
            source_ip=raw.source_ip,
            method=raw.method,
            path=raw.path,
            latitude=location.latitude,
            longitude=location.longitude,
            country_code=location.country_code,
            city=location.city,
            occurred_at=raw.occurred_at,
            status_code=raw.status_code,
            response_size=raw.response_size,
            source=raw.source,
        )

    def to_wire(self) -> dict[str, Any]:
        """Render the viewer stream representation."""
        return {
            "ip": self.source_ip,
            "lat": self.latitude,
            "lng": self.longitude,
            "country": self.country_code,
            "city": self.city,
            "requestType": self.method,
            "path": self.path,
            "statusCode": self.status_code,
            "responseSize": self.response_size,
            "timestamp": int(self.occurred_at.timestamp() * 1000),
            "source": self.source.value,
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "EnrichedEvent":
        """
        Parse a viewer stream object.

        Raises:
            KeyError, TypeError, ValueError: if required fields are missing
                or have the wrong type.
        """
        timestamp = data.get("timestamp")
        occurred_at = (
            datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
            if timestamp is not None
            else _utcnow()
        )
        return cls(
            source_ip=data["ip"],
            method=data.get("requestType") or "GET",
            path=data.get("path") or "/",
            latitude=float(data["lat"]),
            longitude=float(data["lng"]),
            country_code=data.get("country") or "??",
            city=data.get("city"),
            occurred_at=occurred_at,
            status_code=data.get("statusCode"),
            response_size=data.get("responseSize"),
            source=EventOrigin(data.get("source", EventOrigin.REQUEST.value)),
        )
