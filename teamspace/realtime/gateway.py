"""Socket.IO connection handlers."""
import logging
from typing import Optional

from fastapi import HTTPException
import socketio

from teamspace.dependencies import authenticate_token
from teamspace.models import Project, User
from teamspace.realtime.broadcaster import project_room, user_room
from teamspace.utils.time import utc_now

logger = logging.getLogger(__name__)


def _project_id(data) -> Optional[int]:
    """Accept ``5``, ``"5"`` or ``{"projectId": 5}``."""
    if isinstance(data, dict):
        data = data.get("projectId")
    try:
        return int(data)
    except (TypeError, ValueError):
        return None


class SocketGateway:
    """Authenticates sockets and relays room events.

    Every socket joins its ``user:<id>`` room on connect; project rooms are
    joined and left on request and dropped automatically on disconnect.
    """

    def __init__(self, sio, session_factory):
        self.sio = sio
        self.session_factory = session_factory

    def register(self) -> None:
        handlers = {
            "connect": self.connect,
            "disconnect": self.disconnect,
            "join_project": self.join_project,
            "leave_project": self.leave_project,
            "typing_start": self.typing_start,
            "typing_stop": self.typing_stop,
            "typing_end": self.typing_stop,
            "task_update": self.task_update,
            "direct_message": self.direct_message,
        }
        for event, handler in handlers.items():
            self.sio.on(event, handler=handler)

    async def _identity(self, sid) -> dict:
        return await self.sio.get_session(sid)

    async def connect(self, sid, environ, auth=None):
        token = auth.get("token") if isinstance(auth, dict) else None
        if not token:
            raise socketio.exceptions.ConnectionRefusedError("Authentication error: No token provided")

        db = self.session_factory()
        try:
            user = authenticate_token(db, token)
        except HTTPException as exc:
            logger.info("Refused socket %s: %s", sid, exc.detail)
            raise socketio.exceptions.ConnectionRefusedError(f"Authentication error: {exc.detail}")
        finally:
            db.close()

        identity = {"user_id": user.id, "user_name": user.name}
        await self.sio.save_session(sid, identity)
        await self.sio.enter_room(sid, user_room(user.id))
        logger.info("User connected: %s (%s)", user.name, user.id)

        await self.sio.emit("user_online", {"userId": user.id, "userName": user.name})
        return True

    async def disconnect(self, sid, reason=None):
        identity = await self._identity(sid)
        logger.info("User disconnected: %s", identity.get("user_name"))
        await self.sio.emit(
            "user_offline",
            {"userId": identity.get("user_id"), "userName": identity.get("user_name")},
        )

    def _can_join(self, user_id: int, project_id: int) -> bool:
        db = self.session_factory()
        try:
            user = db.get(User, user_id)
            project = db.get(Project, project_id)
            if user is None or project is None or not user.is_active:
                return False
            return user.is_admin or project.is_member(user.id)
        finally:
            db.close()

    async def join_project(self, sid, data):
        project_id = _project_id(data)
        identity = await self._identity(sid)
        if project_id is None or not self._can_join(identity["user_id"], project_id):
            logger.warning("%s may not join project %s", identity.get("user_name"), data)
            return False

        await self.sio.enter_room(sid, project_room(project_id))
        logger.info("%s joined project: %s", identity["user_name"], project_id)
        await self.sio.emit(
            "user_joined",
            {"userId": identity["user_id"], "userName": identity["user_name"], "projectId": project_id},
            room=project_room(project_id),
            skip_sid=sid,
        )
        return True

    async def _member_identity(self, sid, project_id: Optional[int]) -> Optional[dict]:
        """Session identity of a socket allowed to speak in the project room."""
        if project_id is None:
            return None
        identity = await self._identity(sid)
        if not self._can_join(identity["user_id"], project_id):
            logger.warning("%s is not a member of project %s", identity.get("user_name"), project_id)
            return None
        return identity

    async def leave_project(self, sid, data):
        project_id = _project_id(data)
        identity = await self._member_identity(sid, project_id)
        if identity is None:
            return False

        await self.sio.leave_room(sid, project_room(project_id))
        logger.info("%s left project: %s", identity["user_name"], project_id)
        await self.sio.emit(
            "user_left",
            {"userId": identity["user_id"], "userName": identity["user_name"], "projectId": project_id},
            room=project_room(project_id),
            skip_sid=sid,
        )
        return True

    async def _relay_typing(self, sid, data, event):
        project_id = _project_id(data)
        identity = await self._member_identity(sid, project_id)
        if identity is None:
            return
        await self.sio.emit(
            event,
            {"userId": identity["user_id"], "userName": identity["user_name"], "projectId": project_id},
            room=project_room(project_id),
            skip_sid=sid,
        )

    async def typing_start(self, sid, data):
        await self._relay_typing(sid, data, "user_typing")

    async def typing_stop(self, sid, data):
        await self._relay_typing(sid, data, "user_stopped_typing")

    async def task_update(self, sid, data):
        project_id = _project_id(data) if isinstance(data, dict) else None
        identity = await self._member_identity(sid, project_id)
        if identity is None:
            return
        await self.sio.emit(
            "task_updated",
            {"taskId": data.get("taskId"), "updates": data.get("updates"), "updatedBy": identity["user_name"]},
            room=project_room(project_id),
            skip_sid=sid,
        )

    async def direct_message(self, sid, data):
        if not isinstance(data, dict) or data.get("toUserId") is None:
            return
        identity = await self._identity(sid)
        await self.sio.emit(
            "direct_message",
            {
                "from": identity["user_id"],
                "fromName": identity["user_name"],
                "message": data.get("message"),
                "timestamp": utc_now().isoformat(),
            },
            room=user_room(data["toUserId"]),
        )
