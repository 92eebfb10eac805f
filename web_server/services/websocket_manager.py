import json
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Open WebSocket connections keyed by user ID.

    A user may have several dashboards open, so each ID maps to a list.
    """

    def __init__(self):
        self.active_connections: dict[str, list[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.setdefault(user_id, []).append(websocket)

    def disconnect(self, user_id: str, websocket: WebSocket | None = None):
        if websocket is None:
            self.active_connections.pop(user_id, None)
            return
        sockets = self.active_connections.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self.active_connections.pop(user_id, None)

    async def send_to_user(self, user_id: str, data: dict) -> bool:
        """Send JSON to every socket of a user. Returns True if any send succeeded."""
        delivered = False
        for ws in list(self.active_connections.get(user_id, [])):
            try:
                await ws.send_text(json.dumps(data, default=str))
                delivered = True
            except Exception:
                logger.warning("Dropping websocket for %s after failed send", user_id)
                self.disconnect(user_id, ws)
        return delivered
