"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_LOG_PATHS = (
    "/var/log/nginx/access.log",
    "/var/log/apache2/access.log",
    "/var/log/httpd/access_log",
)


def _split_paths(value: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime settings, overridable through environment variables."""

    api_host: str = "localhost"
    api_port: int = 8000

    # Reference point the arcs are drawn to
    server_lat: float = 48.8566
    server_lng: float = 2.3522
    server_label: str = "Paris"

    history_capacity: int = 100
    display_capacity: int = 100
    reconnect_delay: float = 5.0

    log_paths: tuple[str, ...] = field(default=DEFAULT_LOG_PATHS)
    log_poll_interval: float = 0.5

    geoip_db_path: str = "GeoLite2-City.mmdb"
    stream_path: str = "/ws"
    subscriber_queue_size: int = 256

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        log_paths = os.getenv("LOG_PATHS")
        return cls(
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=int(os.getenv("API_PORT", "8000")),
            server_lat=float(os.getenv("SERVER_LAT", "48.8566")),
            server_lng=float(os.getenv("SERVER_LNG", "2.3522")),
            server_label=os.getenv("SERVER_LABEL", "Paris"),
            history_capacity=int(os.getenv("HISTORY_CAPACITY", "100")),
            display_capacity=int(os.getenv("DISPLAY_CAPACITY", "100")),
            reconnect_delay=float(os.getenv("RECONNECT_DELAY", "5.0")),
            log_paths=_split_paths(log_paths) if log_paths else DEFAULT_LOG_PATHS,
            log_poll_interval=float(os.getenv("LOG_POLL_INTERVAL", "0.5")),
            geoip_db_path=os.getenv("GEOIP_DB_PATH", "GeoLite2-City.mmdb"),
            stream_path=os.getenv("STREAM_PATH", "/ws"),
            subscriber_queue_size=int(os.getenv("SUBSCRIBER_QUEUE_SIZE", "256")),
        )
