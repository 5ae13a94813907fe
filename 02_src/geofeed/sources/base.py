"""Common interface for RawEvent producers."""

from typing import Any, Awaitable, Callable, Protocol

from ..models import RawEvent

EventSink = Callable[[RawEvent], Awaitable[Any]]


class IEventSource(Protocol):
    """Something that emits RawEvents into a sink."""

    name: str

    async def start(self, sink: EventSink) -> None:
        """Begin producing events into sink."""
        ...

    async def stop(self) -> None:
        """Stop producing and release resources."""
        ...
