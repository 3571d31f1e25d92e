"""Live updates over Socket.IO.

HTTP handlers publish through :class:`Broadcaster`; :class:`SocketGateway`
authenticates sockets and manages their project and user rooms.
"""
from teamspace.realtime.broadcaster import Broadcaster, project_room, user_room
from teamspace.realtime.gateway import SocketGateway

__all__ = ["Broadcaster", "SocketGateway", "project_room", "user_room"]
