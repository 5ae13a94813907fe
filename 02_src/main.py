"""Main entry point for geofeed."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from geofeed.api import create_fastapi_app
from geofeed.app import Application
from geofeed.config import Settings
from geofeed.logging_config import setup_logging


def main():
    """Run the service."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = Settings.from_env()
    app = create_fastapi_app(Application(settings))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
