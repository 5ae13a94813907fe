"""EventStore module."""

from .store import EventStore, IEventStore

__all__ = ["EventStore", "IEventStore"]
