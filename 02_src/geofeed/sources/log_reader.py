"""LogSourceReader: tails a web-server access log."""

import asyncio
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Iterable

from ..errors import MalformedLogLine, SourceUnavailable
from ..logging_config import get_logger
from ..models import EventOrigin, RawEvent
from .base import EventSink

logger = get_logger(__name__)

# IP ... [timestamp] "METHOD PATH HTTP/x.y" STATUS SIZE
LOG_LINE_PATTERN = re.compile(
    r'^(\S+) .+ \[([^\]]+)\] "(\S+) (\S+) HTTP/[\d.]+" (\d+) (\d+|-)'
)
_TIMESTAMP_FORMATS = ("%d/%b/%Y:%H:%M:%S %z", "%d/%b/%Y:%H:%M:%S")
_READ_CHUNK = 64 * 1024


def parse_log_timestamp(value: str) -> datetime | None:
    """Parse a common-log-format timestamp; naive values are taken as UTC."""
    for fmt in _TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def parse_line(line: str) -> RawEvent:
    """
    Parse one access-log line.

    Raises:
        MalformedLogLine: if the line does not match LOG_LINE_PATTERN.
    """
    match = LOG_LINE_PATTERN.match(line)
    if not match:
        raise MalformedLogLine(line)

    ip, timestamp, method, path, status, size = match.groups()
    return RawEvent(
        source_ip=ip,
        method=method,
        path=path,
        status_code=int(status),
        response_size=None if size == "-" else int(size),
        occurred_at=parse_log_timestamp(timestamp) or datetime.now(timezone.utc),
        source=EventOrigin.LOG,
    )


class LogSourceReader:
    """Follows the first existing candidate log file from its current end.

    The file is polled rather than watched. When a poll finds nothing new the
    path is re-stat'ed: a changed inode means the log was rotated and the new
    file is read from its start, a shrunken file is re-read from offset 0.
    """

    name = "access_log"

    def __init__(self, candidates: Iterable[str | Path], poll_interval: float = 0.5):
        self._candidates = [Path(c) for c in candidates]
        self._poll_interval = poll_interval
        self._path: Path | None = None
        self._sink: EventSink | None = None
        self._file: IO[str] | None = None
        self._inode: int | None = None
        self._partial = ""
        self._task: asyncio.Task | None = None
        self.lines_read = 0
        self.lines_skipped = 0

    @property
    def path(self) -> Path | None:
        """File being tailed, if any."""
        return self._path

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def locate(self) -> Path | None:
        """First candidate that exists as a regular file."""
        for candidate in self._candidates:
            if candidate.is_file():
                return candidate
        return None

    async def start(self, sink: EventSink) -> None:
        """Attach to the log file and start tailing; inert if none exists."""
        path = self.locate()
        if path is None:
            logger.info(
                "No access log found (tried %s), log monitoring disabled",
                ", ".join(str(c) for c in self._candidates),
            )
            return

        try:
            self._file = self._open(path, seek_end=True)
        except SourceUnavailable as e:
            logger.error("Log monitoring disabled: %s", e)
            return

        self._path = path
        self._sink = sink
        self._task = asyncio.create_task(self._tail())
        logger.info("Found log file at %s, monitoring for new entries", path)

    async def stop(self) -> None:
        """Stop tailing and close the file."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._close_file()

    async def _tail(self) -> None:
        try:
            while True:
                lines = self._read_available()
                if lines:
                    for line in lines:
                        await self._handle_line(line)
                    continue
                await asyncio.sleep(self._poll_interval)
                self._check_rotation()
        except SourceUnavailable as e:
            logger.error("Error tailing log file %s: %s", self._path, e)
        finally:
            self._close_file()

    async def _handle_line(self, line: str) -> None:
        self.lines_read += 1
        try:
            raw = parse_line(line)
        except MalformedLogLine as e:
            self.lines_skipped += 1
            logger.debug("%s", e)
            return

        try:
            await self._sink(raw)
        except Exception:
            logger.exception("Failed to ingest log entry from %s", raw.source_ip)

    def _read_available(self) -> list[str]:
        if self._file is None:
            return []
        try:
            chunk = self._file.read(_READ_CHUNK)
        except OSError as e:
            raise SourceUnavailable(f"read failed: {e}") from e
        if not chunk:
            return []

        # Keep an unterminated last line until the writer finishes it
        lines = (self._partial + chunk).split("\n")
        self._partial = lines.pop()
        return [line.rstrip("\r") for line in lines if line.strip()]

    def _check_rotation(self) -> None:
        try:
            st = os.stat(self._path)
        except FileNotFoundError:
            if self._file is not None:
                logger.warning("Log file %s disappeared, waiting for it to return", self._path)
                self._close_file()
            return
        except OSError as e:
            raise SourceUnavailable(f"stat failed: {e}") from e

        if self._file is None:
            self._file = self._open(self._path, seek_end=False)
            logger.info("Reattached to log file %s", self._path)
        elif st.st_ino != self._inode:
            logger.warning("Log rotation detected for %s, reopening", self._path)
            self._close_file()
            self._file = self._open(self._path, seek_end=False)
        elif self._file.tell() > st.st_size:
            logger.warning("Log truncation detected for %s, reading from start", self._path)
            self._file.seek(0)
            self._partial = ""

    def _open(self, path: Path, seek_end: bool) -> IO[str]:
        try:
            f = open(path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            raise SourceUnavailable(f"cannot open {path}: {e}") from e
        if seek_end:
            f.seek(0, os.SEEK_END)
        self._inode = os.fstat(f.fileno()).st_ino
        self._partial = ""
        return f

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
