"""Viewer stream WebSocket route."""

from fastapi import APIRouter, WebSocket

from ...app import Application
from ...logging_config import get_logger

logger = get_logger(__name__)


def create_stream_router(app: Application) -> APIRouter:
    """Create the stream router on the configured path."""
    router = APIRouter(tags=["stream"])

    @router.websocket(app.settings.stream_path)
    async def stream(websocket: WebSocket) -> None:
        """Send the history snapshot, then every live event."""
        await websocket.accept()
        handle = app.hub.subscribe(websocket.send_json, close=websocket.close)
        try:
            # Viewers never send anything; wait for the disconnect
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            app.hub.unsubscribe(handle)

    return router
