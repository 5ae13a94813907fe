"""Tests for IngestionPipeline."""

import asyncio

import pytest

from conftest import RecordingChannel, make_raw
from geofeed.models import EventOrigin


def _paths(messages):
    return [m["path"] for m in messages]


class FakeSource:
    """Minimal IEventSource."""

    name = "fake"

    def __init__(self):
        self.sink = None
        self.stopped = False

    async def start(self, sink):
        self.sink = sink

    async def stop(self):
        self.stopped = True


class TestIngestionPipelineIngest:
    """Tests for IngestionPipeline.ingest()."""

    async def test_ingest_appends_and_publishes(self, pipeline, store, hub):
        """Test a locatable event is stored and broadcast."""
        channel = RecordingChannel()
        hub.subscribe(channel.send)

        event = await pipeline.ingest(make_raw("81.2.69.142", "/api/data"))
        await hub.flush()

        assert event is not None
        assert event.city == "London"
        assert store.snapshot() == [event]
        assert channel.live == [event.to_wire()]
        assert pipeline.accepted == 1

    async def test_loopback_is_dropped(self, pipeline, store, hub):
        """Test 127.0.0.1 is never stored or delivered."""
        channel = RecordingChannel()
        hub.subscribe(channel.send)

        assert await pipeline.ingest(make_raw("127.0.0.1")) is None
        assert await pipeline.ingest(make_raw("::1")) is None
        await hub.flush()

        assert len(store) == 0
        assert channel.live == []
        assert pipeline.dropped == 2

    async def test_unknown_address_is_dropped(self, pipeline, store):
        """Test an address missing from the database is dropped."""
        assert await pipeline.ingest(make_raw("9.9.9.9")) is None
        assert len(store) == 0

    async def test_keeps_source_fields(self, pipeline):
        """Test log fields survive enrichment."""
        raw = make_raw("8.8.8.8", status_code=404, response_size=10, source=EventOrigin.LOG)
        event = await pipeline.ingest(raw)
        assert event.status_code == 404
        assert event.response_size == 10
        assert event.source == EventOrigin.LOG


class TestIngestionPipelineOrdering:
    """Tests for the global publish order."""

    async def test_history_and_delivery_agree(self, pipeline, store, hub):
        """Test concurrent producers yield one order everywhere."""
        first = RecordingChannel()
        second = RecordingChannel(delay=0.001)
        hub.subscribe(first.send)
        hub.subscribe(second.send)

        ips = ["8.8.8.8", "1.1.1.1", "81.2.69.142", "127.0.0.1"]
        raws = [make_raw(ips[n % len(ips)], f"/e/{n}", n=n) for n in range(40)]
        await asyncio.gather(*(pipeline.ingest(r) for r in raws))
        await hub.flush()

        history_order = list(reversed(_paths(e.to_wire() for e in store.snapshot())))
        assert _paths(first.live) == history_order
        assert _paths(second.live) == history_order
        assert len(history_order) == 30

    async def test_subscribers_joining_during_burst(self, pipeline, store, hub):
        """Test two late joiners get their own snapshot then the same tail."""
        early = RecordingChannel()
        late = RecordingChannel()

        await pipeline.ingest(make_raw(path="/e/0", n=0))
        await pipeline.ingest(make_raw(path="/e/1", n=1))
        hub.subscribe(early.send)
        await pipeline.ingest(make_raw(path="/e/2", n=2))
        await pipeline.ingest(make_raw(path="/e/3", n=3))
        hub.subscribe(late.send)
        await pipeline.ingest(make_raw(path="/e/4", n=4))
        await hub.flush()

        assert _paths(early.init["data"]) == ["/e/1", "/e/0"]
        assert _paths(late.init["data"]) == ["/e/3", "/e/2", "/e/1", "/e/0"]
        assert _paths(early.live) == ["/e/2", "/e/3", "/e/4"]
        assert _paths(late.live) == ["/e/4"]

    async def test_broken_subscriber_does_not_fail_ingest(self, pipeline, hub):
        """Test ingest completes when a channel is closed."""
        healthy = RecordingChannel()
        broken = RecordingChannel(fail_after=1)
        hub.subscribe(healthy.send)
        hub.subscribe(broken.send)

        for n in range(3):
            assert await pipeline.ingest(make_raw(path=f"/e/{n}", n=n)) is not None
        await hub.flush()

        assert _paths(healthy.live) == ["/e/0", "/e/1", "/e/2"]
        assert hub.subscriber_count == 1


class TestIngestionPipelineSources:
    """Tests for source attachment."""

    async def test_start_and_stop_sources(self, pipeline, store):
        """Test attached sources get the ingest sink and are stopped."""
        source = FakeSource()
        pipeline.attach(source)

        await pipeline.start()
        await source.sink(make_raw("8.8.8.8"))
        await pipeline.stop()

        assert len(store) == 1
        assert source.stopped is True
