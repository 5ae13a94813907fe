"""BroadcastHub module."""

from .hub import BroadcastHub, CloseFn, IBroadcastHub, SendFn, SubscriberHandle

__all__ = ["BroadcastHub", "IBroadcastHub", "SubscriberHandle", "SendFn", "CloseFn"]
