"""Tests for data models."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from geofeed.models import EnrichedEvent, EventOrigin, Location, RawEvent, ServerLocation


class TestRawEvent:
    """Tests for RawEvent model."""

    def test_defaults(self):
        """Test optional fields default to None and origin to request."""
        raw = RawEvent(source_ip="8.8.8.8", method="GET", path="/")
        assert raw.status_code is None
        assert raw.response_size is None
        assert raw.source == EventOrigin.REQUEST
        assert raw.occurred_at.tzinfo is not None

    def test_immutable(self):
        """Test RawEvent cannot be modified."""
        raw = RawEvent(source_ip="8.8.8.8", method="GET", path="/")
        with pytest.raises(FrozenInstanceError):
            raw.path = "/other"


class TestEnrichedEvent:
    """Tests for EnrichedEvent model."""

    def test_from_raw_copies_fields(self):
        """Test from_raw merges event and location."""
        ts = datetime(2023, 10, 10, 13, 55, 36, tzinfo=timezone.utc)
        raw = RawEvent(
            source_ip="81.2.69.142",
            method="POST",
            path="/login",
            status_code=401,
            response_size=12,
            occurred_at=ts,
            source=EventOrigin.LOG,
        )
        event = EnrichedEvent.from_raw(raw, Location(51.5, -0.09, "GB", "London"))

        assert event.source_ip == "81.2.69.142"
        assert event.method == "POST"
        assert event.status_code == 401
        assert event.response_size == 12
        assert event.latitude == 51.5
        assert event.country_code == "GB"
        assert event.city == "London"
        assert event.occurred_at == ts
        assert event.source == EventOrigin.LOG

    def test_to_wire(self):
        """Test the viewer stream field names."""
        ts = datetime(2023, 10, 10, 13, 55, 36, tzinfo=timezone.utc)
        raw = RawEvent(source_ip="8.8.8.8", method="GET", path="/", occurred_at=ts)
        event = EnrichedEvent.from_raw(raw, Location(37.751, -97.822, "US"))

        assert event.to_wire() == {
            "ip": "8.8.8.8",
            "lat": 37.751,
            "lng": -97.822,
            "country": "US",
            "city": None,
            "requestType": "GET",
            "path": "/",
            "statusCode": None,
            "responseSize": None,
            "timestamp": int(ts.timestamp() * 1000),
            "source": "request",
        }

    def test_from_wire_minimal(self):
        """Test parsing a wire object with only coordinates and ip."""
        event = EnrichedEvent.from_wire({"ip": "1.1.1.1", "lat": "1.5", "lng": 2})
        assert event.latitude == 1.5
        assert event.longitude == 2.0
        assert event.method == "GET"
        assert event.country_code == "??"

    def test_from_wire_missing_coordinates(self):
        """Test that an object without coordinates is rejected."""
        with pytest.raises(KeyError):
            EnrichedEvent.from_wire({"ip": "1.1.1.1"})


class TestServerLocation:
    """Tests for ServerLocation model."""

    def test_to_wire(self):
        """Test reference point serialization."""
        server = ServerLocation(latitude=48.8566, longitude=2.3522, label="Paris")
        assert server.to_wire() == {"lat": 48.8566, "lng": 2.3522, "label": "Paris"}
