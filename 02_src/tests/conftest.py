"""Pytest configuration and fixtures."""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import geoip2.errors
import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Addresses known to the fake GeoIP database: ip -> (lat, lng, country, city)
KNOWN_LOCATIONS = {
    "8.8.8.8": (37.751, -97.822, "US", None),
    "1.1.1.1": (-33.494, 143.2104, "AU", None),
    "81.2.69.142": (51.5142, -0.0931, "GB", "London"),
    "89.160.20.112": (58.4167, 15.6167, "SE", "Linköping"),
    "2.125.160.216": (51.75, -1.25, "GB", "Boxford"),
    "175.16.199.1": (43.88, 125.3228, "CN", "Changchun"),
}


class FakeGeoReader:
    """Stands in for geoip2.database.Reader with a fixed table."""

    def __init__(self, table: dict | None = None):
        self._table = KNOWN_LOCATIONS if table is None else table
        self.lookups: list[str] = []
        self.closed = False

    def city(self, ip: str):
        self.lookups.append(ip)
        if ip not in self._table:
            raise geoip2.errors.AddressNotFoundError(f"{ip} not in database")
        lat, lng, country, city = self._table[ip]
        return SimpleNamespace(
            location=SimpleNamespace(latitude=lat, longitude=lng),
            country=SimpleNamespace(iso_code=country),
            registered_country=SimpleNamespace(iso_code=country),
            city=SimpleNamespace(name=city),
        )

    def close(self) -> None:
        self.closed = True


class RecordingChannel:
    """Subscriber channel that records what it is sent."""

    def __init__(self, fail_after: int | None = None, delay: float = 0.0):
        self.messages: list[dict] = []
        self.closed = False
        self._fail_after = fail_after
        self._delay = delay

    async def send(self, message: dict) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail_after is not None and len(self.messages) >= self._fail_after:
            raise ConnectionResetError("channel closed")
        self.messages.append(message)

    async def close(self) -> None:
        self.closed = True

    @property
    def init(self) -> dict:
        return self.messages[0]

    @property
    def live(self) -> list[dict]:
        return self.messages[1:]


_BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_raw(ip: str = "8.8.8.8", path: str = "/", method: str = "GET", n: int = 0, **kwargs):
    """Build a RawEvent whose timestamp increases with n."""
    from geofeed.models import RawEvent

    return RawEvent(
        source_ip=ip,
        method=method,
        path=path,
        occurred_at=_BASE_TIME + timedelta(seconds=n),
        **kwargs,
    )


def make_event(n: int = 0, ip: str = "8.8.8.8", **kwargs):
    """Build an EnrichedEvent tagged by its path /e/<n>."""
    from geofeed.models import EnrichedEvent, Location

    lat, lng, country, city = KNOWN_LOCATIONS.get(ip, (10.0, 20.0, "US", None))
    raw = make_raw(ip=ip, path=f"/e/{n}", n=n, **kwargs)
    return EnrichedEvent.from_raw(raw, Location(lat, lng, country, city))


async def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll predicate until it is true or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


@pytest.fixture
def geo_reader():
    """Fake GeoIP reader."""
    return FakeGeoReader()


@pytest.fixture
def resolver(geo_reader):
    """GeoResolver backed by the fake reader."""
    from geofeed.geo import GeoResolver

    return GeoResolver(reader=geo_reader)


@pytest.fixture
def store():
    """EventStore with the default capacity."""
    from geofeed.store import EventStore

    return EventStore(capacity=100)


@pytest_asyncio.fixture
async def hub(store):
    """BroadcastHub over the store."""
    from geofeed.broadcast import BroadcastHub

    h = BroadcastHub(store, queue_size=64)
    yield h
    await h.close()


@pytest.fixture
def pipeline(resolver, store, hub):
    """IngestionPipeline wired to the fake resolver."""
    from geofeed.pipeline import IngestionPipeline

    return IngestionPipeline(resolver, store, hub)


@pytest.fixture
def server_location():
    """Reference point used by client-side tests."""
    from geofeed.models import ServerLocation

    return ServerLocation(latitude=48.8566, longitude=2.3522, label="Paris")


@pytest.fixture
def settings(tmp_path):
    """Settings that never touch real log files or GeoIP data."""
    from geofeed.config import Settings

    return Settings(
        log_paths=(str(tmp_path / "access.log"),),
        log_poll_interval=0.01,
        geoip_db_path=str(tmp_path / "missing.mmdb"),
        reconnect_delay=0.01,
    )
