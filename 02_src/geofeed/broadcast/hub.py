"""BroadcastHub: fan-out of enriched events to live subscribers."""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from ..errors import SubscriberDeliveryFailure
from ..logging_config import get_logger
from ..models import EnrichedEvent
from ..store import IEventStore

logger = get_logger(__name__)


SendFn = Callable[[dict[str, Any]], Awaitable[None]]
CloseFn = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class SubscriberHandle:
    """Opaque reference to a registered subscriber."""

    id: str


class IBroadcastHub(Protocol):
    """Tracks viewer channels and pushes events to all of them."""

    def subscribe(self, send: SendFn, close: CloseFn | None = None) -> SubscriberHandle:
        """Register a channel; its first message is the history snapshot."""
        ...

    def unsubscribe(self, handle: SubscriberHandle) -> None:
        """Remove a channel. Safe to call more than once."""
        ...

    def publish(self, event: EnrichedEvent) -> None:
        """Queue event for every live channel."""
        ...


class _Subscriber:
    """One viewer channel with its own outbound queue and pump task."""

    def __init__(
        self,
        handle: SubscriberHandle,
        send: SendFn,
        close: CloseFn | None,
        queue_size: int,
    ):
        self.handle = handle
        self.send = send
        self.close = close
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self.task: asyncio.Task | None = None
        self.started = False

    def offer(self, message: dict[str, Any]) -> None:
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            raise SubscriberDeliveryFailure(
                f"subscriber {self.handle.id} is {self.queue.qsize()} messages behind"
            ) from None

    def discard_pending(self) -> None:
        while not self.queue.empty():
            self.queue.get_nowait()
            self.queue.task_done()


class BroadcastHub:
    """Explicit registry of subscriber handles to outbound channels.

    ``subscribe`` and ``publish`` never await, so within the event loop a
    subscriber is either registered before a publish (and gets the event
    after its snapshot) or after it (and sees the event in its snapshot).
    Each channel is drained by its own pump task, so a slow or broken
    viewer never holds up the others or the producers.
    """

    def __init__(self, store: IEventStore, queue_size: int = 256):
        self._store = store
        self._queue_size = queue_size
        self._subscribers: dict[str, _Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, send: SendFn, close: CloseFn | None = None) -> SubscriberHandle:
        """Register a channel; its first message is the history snapshot."""
        handle = SubscriberHandle(id=uuid.uuid4().hex)
        subscriber = _Subscriber(handle, send, close, self._queue_size)

        history = [event.to_wire() for event in self._store.snapshot()]
        subscriber.offer({"type": "init", "data": history})

        self._subscribers[handle.id] = subscriber
        subscriber.task = asyncio.create_task(self._pump(subscriber))

        logger.info(
            "Subscriber %s connected (%d events in snapshot, %d subscribers)",
            handle.id,
            len(history),
            len(self._subscribers),
        )
        return handle

    def unsubscribe(self, handle: SubscriberHandle) -> None:
        """Remove a channel. Safe to call more than once."""
        subscriber = self._subscribers.get(handle.id)
        if subscriber is None:
            return
        self._drop(subscriber)
        # A pump that has not run yet sees it is unregistered and exits on its own
        if subscriber.started and subscriber.task and not subscriber.task.done():
            subscriber.task.cancel()

    def publish(self, event: EnrichedEvent) -> None:
        """Queue event for every live channel."""
        message = event.to_wire()
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber.offer(message)
            except SubscriberDeliveryFailure as e:
                logger.warning("Disconnecting slow subscriber: %s", e)
                self.unsubscribe(subscriber.handle)

    async def flush(self) -> None:
        """Wait until every channel has sent everything queued so far."""
        queues = [s.queue for s in self._subscribers.values()]
        if queues:
            await asyncio.gather(*(q.join() for q in queues))

    async def close(self) -> None:
        """Disconnect every subscriber and wait for their pumps to exit."""
        subscribers = list(self._subscribers.values())
        for subscriber in subscribers:
            self.unsubscribe(subscriber.handle)
        tasks = [s.task for s in subscribers if s.task]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _drop(self, subscriber: _Subscriber) -> None:
        if self._subscribers.pop(subscriber.handle.id, None) is None:
            return
        subscriber.discard_pending()
        logger.info(
            "Subscriber %s disconnected (%d subscribers)",
            subscriber.handle.id,
            len(self._subscribers),
        )

    async def _deliver(self, subscriber: _Subscriber, message: dict[str, Any]) -> None:
        try:
            await subscriber.send(message)
        except Exception as e:
            raise SubscriberDeliveryFailure(
                f"send to subscriber {subscriber.handle.id} failed: {e!r}"
            ) from e

    async def _pump(self, subscriber: _Subscriber) -> None:
        subscriber.started = True
        try:
            while subscriber.handle.id in self._subscribers:
                message = await subscriber.queue.get()
                try:
                    await self._deliver(subscriber, message)
                finally:
                    subscriber.queue.task_done()
        except SubscriberDeliveryFailure as e:
            logger.warning("%s", e)
        finally:
            self._drop(subscriber)
            await self._close_channel(subscriber)

    async def _close_channel(self, subscriber: _Subscriber) -> None:
        if subscriber.close is None:
            return
        try:
            await subscriber.close()
        except Exception as e:
            # Already closed by the peer
            logger.debug("Closing subscriber %s: %s", subscriber.handle.id, e)
