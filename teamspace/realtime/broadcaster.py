"""Fire-and-forget event fan-out to project and user rooms."""
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def project_room(project_id) -> str:
    return f"project:{project_id}"


def user_room(user_id) -> str:
    return f"user:{user_id}"


class Broadcaster:
    """Publishes events to connected sockets.

    Nothing is queued or persisted: an event with no subscribers is dropped,
    and emit failures are logged rather than raised to the caller.
    """

    def __init__(self, sio: Optional[Any] = None):
        self.sio = sio

    async def emit(self, event: str, payload: Any, room: Optional[str] = None) -> None:
        if self.sio is None:
            return
        try:
            await self.sio.emit(event, payload, room=room)
        except Exception:
            logger.exception("Failed to emit %s to %s", event, room or "all sockets")

    async def to_project(self, project_id: int, event: str, payload: Any) -> None:
        await self.emit(event, payload, room=project_room(project_id))

    async def to_user(self, user_id: int, event: str, payload: Any) -> None:
        await self.emit(event, payload, room=user_room(user_id))

    async def to_all(self, event: str, payload: Any) -> None:
        await self.emit(event, payload)
