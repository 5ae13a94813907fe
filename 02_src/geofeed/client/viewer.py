"""ViewerClient: subscribes to the event stream over a WebSocket."""

import asyncio
import json
from typing import Any, AsyncContextManager, Callable

import websockets
from websockets.exceptions import WebSocketException

from ..errors import TransportLost
from ..logging_config import get_logger
from ..models import DisplayEntry
from .queue import ClientEventQueue

logger = get_logger(__name__)

ConnectFn = Callable[[str], AsyncContextManager[Any]]
FrameFn = Callable[[list[DisplayEntry]], None]


class ViewerClient:
    """Feeds a ClientEventQueue from the stream and drains it on a timer.

    A lost connection is retried after a fixed delay; the server answers
    every new connection with a fresh init batch, so no state is carried
    over between sessions.
    """

    def __init__(
        self,
        url: str,
        queue: ClientEventQueue,
        reconnect_delay: float = 5.0,
        connect: ConnectFn | None = None,
        on_frame: FrameFn | None = None,
    ):
        self._url = url
        self._queue = queue
        self._reconnect_delay = reconnect_delay
        self._connect = connect or websockets.connect
        self._on_frame = on_frame
        self._running = False
        self._task: asyncio.Task | None = None
        self._ticker: asyncio.Task | None = None
        self.connected = False
        self.sessions = 0

    @property
    def queue(self) -> ClientEventQueue:
        return self._queue

    async def start(self, frame_interval: float = 1 / 30) -> None:
        """Start receiving and ticking in background tasks."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run())
        self._ticker = asyncio.create_task(self._tick_loop(frame_interval))

    async def stop(self) -> None:
        """Stop receiving and ticking."""
        self._running = False
        for task in (self._task, self._ticker):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._ticker = None

    def tick(self) -> list[DisplayEntry]:
        """Drain queued events into the display set; one call per frame."""
        added = self._queue.drain()
        if added and self._on_frame:
            self._on_frame(self._queue.display)
        return added

    async def _tick_loop(self, interval: float) -> None:
        while self._running:
            self.tick()
            await asyncio.sleep(interval)

    async def _run(self) -> None:
        while self._running:
            try:
                await self._session()
            except TransportLost as e:
                logger.warning(
                    "Connection lost (%s), reconnecting in %.1fs", e, self._reconnect_delay
                )
            await asyncio.sleep(self._reconnect_delay)

    async def _session(self) -> None:
        try:
            async with self._connect(self._url) as ws:
                self.connected = True
                self.sessions += 1
                logger.info("Connected to %s", self._url)
                async for raw in ws:
                    self._on_raw(raw)
        except (WebSocketException, OSError, asyncio.TimeoutError) as e:
            # Covers refused upgrades and open timeouts as well as dropped streams
            raise TransportLost(str(e) or type(e).__name__) from e
        finally:
            self.connected = False
        raise TransportLost("stream closed by server")

    def _on_raw(self, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except ValueError as e:
            logger.warning("Ignoring non-JSON stream message: %s", e)
            return
        if not isinstance(message, dict):
            logger.warning("Ignoring unexpected stream message of type %s", type(message).__name__)
            return
        self._queue.handle_message(message)
