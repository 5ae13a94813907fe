"""SIM implementation - synthetic traffic from around the world."""

import asyncio
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import httpx

from geofeed.logging_config import get_logger

logger = get_logger(__name__)

# Public addresses spread over several continents
SAMPLE_IPS = [
    "8.8.8.8",
    "1.1.1.1",
    "81.2.69.142",
    "89.160.20.112",
    "2.125.160.216",
    "175.16.199.1",
    "216.160.83.56",
    "202.196.224.1",
    "67.43.156.1",
    "149.101.100.1",
]

SAMPLE_REQUESTS = [
    ("GET", "/"),
    ("GET", "/api/connections"),
    ("GET", "/api/health"),
    ("POST", "/api/login"),
    ("GET", "/blog/post-42"),
    ("DELETE", "/api/items/7"),
    ("GET", "/missing-page"),
]


class ISim(Protocol):
    """Generate synthetic traffic."""

    async def start(self) -> None:
        """Start scenario."""
        ...

    async def stop(self) -> None:
        """Stop scenario."""
        ...


def format_log_line(ip: str, method: str, path: str, status: int, size: int, when: datetime) -> str:
    """Render one common-log-format line."""
    stamp = when.strftime("%d/%b/%Y:%H:%M:%S %z")
    return f'{ip} - - [{stamp}] "{method} {path} HTTP/1.1" {status} {size}\n'


class Sim:
    """Sends requests with spoofed client addresses and writes access-log lines."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        log_path: str | Path | None = None,
        rounds: int = 10,
        delay: tuple[float, float] = (0.2, 1.0),
        rng: random.Random | None = None,
    ):
        self._api_url = api_url
        self._log_path = Path(log_path) if log_path else None
        self._rounds = rounds
        self._delay = delay
        self._rng = rng or random.Random()
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None
        self.sent = 0
        self.logged = 0

    async def start(self, client: httpx.AsyncClient | None = None) -> None:
        """Start the scenario in the background."""
        if self._running:
            return

        self._running = True
        self._client = client or httpx.AsyncClient(base_url=self._api_url)
        self._task = asyncio.create_task(self._run_scenario())

    async def wait(self) -> None:
        """Wait for the scenario to finish."""
        if self._task:
            await self._task

    async def stop(self) -> None:
        """Stop scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._client:
            await self._client.aclose()
            self._client = None

    async def _run_scenario(self) -> None:
        """Alternate HTTP requests and log lines."""
        for _ in range(self._rounds):
            if not self._running:
                break

            ip = self._rng.choice(SAMPLE_IPS)
            method, path = self._rng.choice(SAMPLE_REQUESTS)

            await self._send_request(ip, method, path)
            if self._log_path:
                self._write_log_line(ip, method, path)

            await asyncio.sleep(self._rng.uniform(*self._delay))

        logger.info("SIM: finished (%d requests, %d log lines)", self.sent, self.logged)

    async def _send_request(self, ip: str, method: str, path: str) -> None:
        """Send one request as if it came from ip."""
        if not self._client:
            return

        try:
            response = await self._client.request(
                method,
                path,
                headers={"X-Forwarded-For": ip},
                timeout=10.0,
            )
            self.sent += 1
            logger.info("SIM: %s %s from %s -> %s", method, path, ip, response.status_code)
        except httpx.HTTPError as e:
            logger.error("SIM: Failed to send request: %s", e)

    def _write_log_line(self, ip: str, method: str, path: str) -> None:
        status = 404 if path == "/missing-page" else 200
        size = self._rng.randint(128, 8192)
        line = format_log_line(ip, method, path, status, size, datetime.now(timezone.utc))
        with open(self._log_path, "a", encoding="utf-8") as f:
            f.write(line)
        self.logged += 1
