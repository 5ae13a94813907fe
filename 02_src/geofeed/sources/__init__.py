"""RawEvent sources."""

from .base import EventSink, IEventSource
from .log_reader import LOG_LINE_PATTERN, LogSourceReader, parse_line
from .request_observer import RequestObserver, RequestObserverMiddleware, client_ip

__all__ = [
    "EventSink",
    "IEventSource",
    "LOG_LINE_PATTERN",
    "LogSourceReader",
    "parse_line",
    "RequestObserver",
    "RequestObserverMiddleware",
    "client_ip",
]
