"""Run the traffic simulator against a local geofeed instance."""

import asyncio
import os

from dotenv import load_dotenv

from geofeed.logging_config import setup_logging

from .sim import Sim


async def _run() -> None:
    host = os.getenv("API_HOST", "localhost")
    port = int(os.getenv("API_PORT", "8000"))
    sim = Sim(
        api_url=f"http://{host}:{port}",
        log_path=os.getenv("SIM_LOG_PATH") or None,
        rounds=int(os.getenv("SIM_ROUNDS", "50")),
    )
    await sim.start()
    try:
        await sim.wait()
    finally:
        await sim.stop()


def main():
    load_dotenv()
    setup_logging(log_file="")
    asyncio.run(_run())


if __name__ == "__main__":
    main()
