"""RequestObserver: turns inbound HTTP requests into RawEvents."""

import asyncio
from pathlib import PurePosixPath

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..logging_config import get_logger
from ..models import EventOrigin, RawEvent
from .base import EventSink

logger = get_logger(__name__)

STATIC_EXTENSIONS = frozenset(
    {".js", ".css", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".map", ".woff", ".woff2", ".json"}
)


def client_ip(request: Request) -> str | None:
    """Originating address, honouring reverse-proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


class RequestObserver:
    """Event source fed by the HTTP middleware.

    ``observe`` builds the RawEvent synchronously and hands it to the sink in
    a background task, so the observed request never waits on ingestion.
    """

    name = "http_requests"

    def __init__(self, stream_path: str = "/ws"):
        self._stream_path = stream_path
        self._sink: EventSink | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def started(self) -> bool:
        return self._sink is not None

    def should_observe(self, path: str) -> bool:
        """False for the stream handshake and static assets."""
        if path == self._stream_path or path.startswith(self._stream_path + "/"):
            return False
        return PurePosixPath(path).suffix.lower() not in STATIC_EXTENSIONS

    async def start(self, sink: EventSink) -> None:
        self._sink = sink

    async def stop(self) -> None:
        self._sink = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def observe(self, method: str, path: str, ip: str | None) -> RawEvent | None:
        """Record one request; returns the RawEvent or None if skipped."""
        if self._sink is None or not ip or not self.should_observe(path):
            return None

        raw = RawEvent(source_ip=ip, method=method, path=path, source=EventOrigin.REQUEST)
        task = asyncio.create_task(self._sink(raw))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return raw

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Failed to ingest request event: %s", error, exc_info=error)


class RequestObserverMiddleware(BaseHTTPMiddleware):
    """Reports every HTTP request to a RequestObserver before handling it."""

    def __init__(self, app, *, observer: RequestObserver):
        super().__init__(app)
        self.observer = observer

    async def dispatch(self, request: Request, call_next):
        try:
            self.observer.observe(request.method, request.url.path, client_ip(request))
        except Exception:
            logger.exception("Request observation failed for %s", request.url.path)
        return await call_next(request)
