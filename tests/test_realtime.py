import asyncio

import pytest
import socketio

from teamspace.realtime import Broadcaster, SocketGateway
from teamspace.security import create_access_token


class FakeServer:
    """Just enough of ``socketio.AsyncServer`` to drive the gateway."""

    def __init__(self):
        self.handlers = {}
        self.sessions = {}
        self.rooms = {}
        self.emitted = []

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def save_session(self, sid, session):
        self.sessions[sid] = session

    async def get_session(self, sid):
        return self.sessions[sid]

    async def enter_room(self, sid, room):
        self.rooms.setdefault(sid, set()).add(room)

    async def leave_room(self, sid, room):
        self.rooms.setdefault(sid, set()).discard(room)

    async def emit(self, event, data=None, room=None, skip_sid=None):
        self.emitted.append({"event": event, "data": data, "room": room, "skip_sid": skip_sid})

    def events(self, name):
        return [item for item in self.emitted if item["event"] == name]


@pytest.fixture
def server(session_factory):
    fake = FakeServer()
    SocketGateway(fake, session_factory).register()
    return fake


def _connect(server, sid, user):
    token = create_access_token(user.id)
    return asyncio.run(server.handlers["connect"](sid, {}, {"token": token}))


def test_register_binds_all_events(server):
    assert set(server.handlers) == {
        "connect",
        "disconnect",
        "join_project",
        "leave_project",
        "typing_start",
        "typing_stop",
        "typing_end",
        "task_update",
        "direct_message",
    }


def test_connect_requires_valid_token(server, editor):
    with pytest.raises(socketio.exceptions.ConnectionRefusedError):
        asyncio.run(server.handlers["connect"]("sid-1", {}, None))

    with pytest.raises(socketio.exceptions.ConnectionRefusedError):
        asyncio.run(server.handlers["connect"]("sid-1", {}, {"token": "forged"}))

    assert server.emitted == []


def test_connect_joins_user_room_and_announces(server, editor):
    assert _connect(server, "sid-1", editor) is True

    assert server.rooms["sid-1"] == {f"user:{editor.id}"}
    assert server.sessions["sid-1"] == {"user_id": editor.id, "user_name": "Bob Builder"}
    online = server.events("user_online")
    assert online[0]["data"] == {"userId": editor.id, "userName": "Bob Builder"}

    asyncio.run(server.handlers["disconnect"]("sid-1"))
    assert server.events("user_offline")[0]["data"]["userId"] == editor.id


def test_join_project_checks_membership(server, admin, editor, make_user, make_project):
    outsider = make_user("Olivia Outsider", "olivia@example.com")
    project = make_project(admin, members=[editor])
    _connect(server, "sid-bob", editor)
    _connect(server, "sid-olivia", outsider)
    _connect(server, "sid-alice", admin)

    assert asyncio.run(server.handlers["join_project"]("sid-bob", project.id)) is True
    assert asyncio.run(server.handlers["join_project"]("sid-olivia", {"projectId": project.id})) is False
    assert asyncio.run(server.handlers["join_project"]("sid-alice", str(project.id))) is True

    room = f"project:{project.id}"
    assert room in server.rooms["sid-bob"]
    assert room not in server.rooms["sid-olivia"]
    joined = server.events("user_joined")
    assert [(item["data"]["userId"], item["room"], item["skip_sid"]) for item in joined] == [
        (editor.id, room, "sid-bob"),
        (admin.id, room, "sid-alice"),
    ]

    asyncio.run(server.handlers["leave_project"]("sid-bob", project.id))
    assert room not in server.rooms["sid-bob"]
    assert server.events("user_left")[0]["skip_sid"] == "sid-bob"


def test_typing_and_task_update_relay_to_rest_of_room(server, admin, editor, make_project):
    project = make_project(admin, members=[editor])
    _connect(server, "sid-bob", editor)
    room = f"project:{project.id}"
    asyncio.run(server.handlers["join_project"]("sid-bob", project.id))

    asyncio.run(server.handlers["typing_start"]("sid-bob", {"projectId": project.id}))
    asyncio.run(server.handlers["typing_end"]("sid-bob", {"projectId": project.id}))
    asyncio.run(server.handlers["task_update"]("sid-bob", {"projectId": project.id, "taskId": 7, "updates": {"title": "x"}}))
    asyncio.run(server.handlers["task_update"]("sid-bob", "not a dict"))

    typing = server.events("user_typing")
    stopped = server.events("user_stopped_typing")
    assert typing[0]["room"] == room and typing[0]["skip_sid"] == "sid-bob"
    assert stopped[0]["data"]["userName"] == "Bob Builder"

    updated = server.events("task_updated")
    assert len(updated) == 1
    assert updated[0]["data"] == {"taskId": 7, "updates": {"title": "x"}, "updatedBy": "Bob Builder"}
    assert updated[0]["skip_sid"] == "sid-bob"


def test_outsiders_cannot_relay_into_project_rooms(server, admin, make_user, make_project):
    outsider = make_user("Olivia Outsider", "olivia@example.com")
    project = make_project(admin)
    _connect(server, "sid-olivia", outsider)
    assert asyncio.run(server.handlers["join_project"]("sid-olivia", project.id)) is False

    asyncio.run(server.handlers["typing_start"]("sid-olivia", {"projectId": project.id}))
    asyncio.run(server.handlers["typing_stop"]("sid-olivia", {"projectId": project.id}))
    asyncio.run(
        server.handlers["task_update"](
            "sid-olivia", {"projectId": project.id, "taskId": 1, "updates": {"status": "done"}}
        )
    )
    assert asyncio.run(server.handlers["leave_project"]("sid-olivia", project.id)) is False

    room = f"project:{project.id}"
    assert [item for item in server.emitted if item["room"] == room] == []


def test_direct_message_goes_to_user_room(server, admin, editor):
    _connect(server, "sid-bob", editor)

    asyncio.run(server.handlers["direct_message"]("sid-bob", {"toUserId": admin.id, "message": "hi"}))

    relayed = server.events("direct_message")
    assert relayed[0]["room"] == f"user:{admin.id}"
    assert relayed[0]["data"]["from"] == editor.id
    assert relayed[0]["data"]["message"] == "hi"


def test_broadcaster_targets_rooms_and_swallows_failures(caplog):
    server = FakeServer()
    broadcaster = Broadcaster(server)

    asyncio.run(broadcaster.to_project(3, "new_message", {"id": 1}))
    asyncio.run(broadcaster.to_user(4, "notification", {"type": "mention"}))
    asyncio.run(broadcaster.to_all("user_online", {}))
    assert [(item["event"], item["room"]) for item in server.emitted] == [
        ("new_message", "project:3"),
        ("notification", "user:4"),
        ("user_online", None),
    ]

    async def failing_emit(*args, **kwargs):
        raise RuntimeError("socket closed")

    server.emit = failing_emit
    asyncio.run(broadcaster.to_project(3, "new_message", {"id": 2}))
    assert "Failed to emit new_message" in caplog.text

    asyncio.run(Broadcaster(None).to_all("user_online", {}))
