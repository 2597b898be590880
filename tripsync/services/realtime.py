"""Socket.IO event handlers: presence, room membership and chat messages."""
from __future__ import annotations

import asyncio
import logging
from http.cookies import SimpleCookie
from typing import Any, Callable, TypeVar
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..constants import ACCESS_COOKIE, GENERIC_SERVER_ERROR, ROOM_FORBIDDEN
from ..database import create_session
from ..errors import WorkflowError
from ..models import ChatRoom
from .auth_service import user_from_token
from .chat_service import is_room_member, require_room_access, save_message
from .friendship_service import friend_uuids
from .group_service import is_group_member
from .notifier import socket_server

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_MESSAGE_LENGTH = 2000


class OnlineUsers:
    """Tracks which users have at least one connected socket."""

    def __init__(self) -> None:
        self._sockets: dict[UUID, set[str]] = {}
        self._owners: dict[str, UUID] = {}
        self._lock = asyncio.Lock()

    async def add(self, user_uuid: UUID, sid: str) -> bool:
        """Register ``sid`` and return ``True`` when it is the user's first socket."""

        async with self._lock:
            sockets = self._sockets.setdefault(user_uuid, set())
            first = not sockets
            sockets.add(sid)
            self._owners[sid] = user_uuid
            return first

    async def remove(self, sid: str) -> tuple[UUID | None, bool]:
        """Forget ``sid`` and return its user and whether that was the last socket."""

        async with self._lock:
            user_uuid = self._owners.pop(sid, None)
            if user_uuid is None:
                return None, False
            sockets = self._sockets.get(user_uuid, set())
            sockets.discard(sid)
            if sockets:
                return user_uuid, False
            self._sockets.pop(user_uuid, None)
            return user_uuid, True

    async def online_among(self, user_uuids: list[UUID]) -> list[UUID]:
        async with self._lock:
            return [user_uuid for user_uuid in user_uuids if self._sockets.get(user_uuid)]


online_users = OnlineUsers()


async def _with_session(work: Callable[[Session], T]) -> T:
    def _run() -> T:
        session = create_session()
        try:
            return work(session)
        finally:
            session.close()

    return await asyncio.to_thread(_run)


def _token_from_environ(environ: dict[str, Any]) -> str | None:
    raw = environ.get("HTTP_COOKIE") or ""
    if not raw:
        return None
    cookie: SimpleCookie = SimpleCookie()
    cookie.load(raw)
    morsel = cookie.get(ACCESS_COOKIE)
    return morsel.value if morsel else None


def can_join_room(db: Session, user_uuid: UUID, room_id: str) -> bool:
    """Users may join their own room, their groups' rooms and chat rooms they belong to."""

    try:
        room_uuid = UUID(str(room_id))
    except ValueError:
        return False
    if room_uuid == user_uuid:
        return True
    if is_group_member(db, room_uuid, user_uuid):
        return True
    room = db.get(ChatRoom, room_uuid)
    return room is not None and is_room_member(db, room, user_uuid)


async def _user_uuid(sid: str) -> UUID | None:
    session = await socket_server.get_session(sid)
    value = session.get("user_uuid") if session else None
    return UUID(value) if value else None


async def _broadcast_presence(user_uuid: UUID, online: bool) -> None:
    friends = await _with_session(lambda db: friend_uuids(db, user_uuid))
    payload = {"userUuid": str(user_uuid), "online": online}
    for friend in friends:
        await socket_server.emit("userOnlineStatus", payload, room=str(friend))


@socket_server.event
async def connect(sid: str, environ: dict[str, Any], auth: Any = None) -> None:
    token = _token_from_environ(environ)
    if not token and isinstance(auth, dict):
        token = auth.get("token")
    user = await _with_session(lambda db: user_from_token(db, token))
    if user is None:
        logger.info("Rejected socket %s without a valid session", sid)
        raise ConnectionRefusedError("authentication failed")

    user_uuid = UUID(str(user.uuid))
    await socket_server.save_session(sid, {"user_uuid": str(user_uuid)})
    await socket_server.enter_room(sid, str(user_uuid))
    if await online_users.add(user_uuid, sid):
        await _broadcast_presence(user_uuid, True)
    logger.info("Socket %s connected for user %s", sid, user_uuid)


@socket_server.event
async def disconnect(sid: str, *args: Any) -> None:
    user_uuid, last = await online_users.remove(sid)
    if user_uuid is not None and last:
        await _broadcast_presence(user_uuid, False)
    logger.info("Socket %s disconnected", sid)


@socket_server.event
async def joinRoom(sid: str, room_id: str) -> None:
    user_uuid = await _user_uuid(sid)
    if user_uuid is None:
        return
    allowed = await _with_session(lambda db: can_join_room(db, user_uuid, room_id))
    if not allowed:
        await socket_server.emit("error", {"message": ROOM_FORBIDDEN}, to=sid)
        return
    await socket_server.enter_room(sid, str(room_id))
    logger.debug("Socket %s joined room %s", sid, room_id)


@socket_server.event
async def leaveRoom(sid: str, room_id: str) -> None:
    await socket_server.leave_room(sid, str(room_id))


@socket_server.event
async def sendMessage(sid: str, data: dict[str, Any]) -> None:
    user_uuid = await _user_uuid(sid)
    if user_uuid is None or not isinstance(data, dict):
        return
    text = str(data.get("message") or "").strip()
    try:
        room_uuid = UUID(str(data.get("roomUuid")))
    except ValueError:
        await socket_server.emit("error", {"message": "roomUuid is invalid."}, to=sid)
        return
    if not text or len(text) > MAX_MESSAGE_LENGTH:
        await socket_server.emit("error", {"message": "Message must be 1-2000 characters."}, to=sid)
        return

    def _persist(db: Session):
        require_room_access(db, room_uuid, user_uuid)
        return save_message(db, room_uuid=room_uuid, sender_uuid=user_uuid, message=text)

    try:
        message = await _with_session(_persist)
    except HTTPException as exc:
        await socket_server.emit("error", {"message": exc.detail}, to=sid)
        return
    except WorkflowError:
        await socket_server.emit("error", {"message": GENERIC_SERVER_ERROR}, to=sid)
        return
    await socket_server.emit("receiveMessage", message.model_dump(mode="json"), room=str(room_uuid))


@socket_server.event
async def getFriendsOnlineStatus(sid: str, *args: Any) -> None:
    user_uuid = await _user_uuid(sid)
    if user_uuid is None:
        return
    friends = await _with_session(lambda db: friend_uuids(db, user_uuid))
    online = await online_users.online_among(friends)
    await socket_server.emit("friendsOnlineStatus", {"onlineFriends": [str(item) for item in online]}, to=sid)


__all__ = ["OnlineUsers", "online_users", "can_join_room", "socket_server"]
