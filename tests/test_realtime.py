"""Notifier delivery, presence tracking and socket room authorisation."""
from __future__ import annotations

import asyncio
import uuid

from tripsync.services import SocketIONotifier, create_group, create_group_room_with_leader, get_or_create_dm_room
from tripsync.services.realtime import OnlineUsers, can_join_room


class _FakeServer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.emitted: list[tuple[str, dict, str]] = []

    async def emit(self, event, data, room=None):
        if self.fail:
            raise ConnectionError("socket layer down")
        self.emitted.append((event, data, room))


def test_notifier_serialises_payload_for_room():
    server = _FakeServer()
    room = uuid.uuid4()
    vote_uuid = uuid.uuid4()

    asyncio.run(SocketIONotifier(server).publish(room, "travelVoteCreated", {"voteUuid": vote_uuid}))

    assert server.emitted == [("travelVoteCreated", {"voteUuid": str(vote_uuid)}, str(room))]


def test_notifier_swallows_delivery_failures():
    server = _FakeServer(fail=True)
    asyncio.run(SocketIONotifier(server).publish("room", "receiveMessage", {"message": "hi"}))
    assert server.emitted == []


def test_online_users_track_multiple_sockets():
    async def scenario():
        online = OnlineUsers()
        user = uuid.uuid4()
        other = uuid.uuid4()

        assert await online.add(user, "sid-1") is True
        assert await online.add(user, "sid-2") is False
        assert await online.online_among([user, other]) == [user]

        assert await online.remove("sid-1") == (user, False)
        assert await online.remove("sid-2") == (user, True)
        assert await online.remove("sid-unknown") == (None, False)
        assert await online.online_among([user]) == []

    asyncio.run(scenario())


def test_can_join_room_rules(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    outsider = user_factory("Omar Reyes")
    group = create_group(db, "Fjord Friends", None, "public", alice.uuid)
    group_room = create_group_room_with_leader(db, group.uuid, alice.uuid)
    dm_room = get_or_create_dm_room(db, alice.uuid, bruno.uuid)

    assert can_join_room(db, alice.uuid, str(alice.uuid))
    assert can_join_room(db, alice.uuid, str(group.uuid))
    assert can_join_room(db, alice.uuid, str(group_room))
    assert can_join_room(db, bruno.uuid, str(dm_room))

    assert not can_join_room(db, outsider.uuid, str(group.uuid))
    assert not can_join_room(db, outsider.uuid, str(dm_room))
    assert not can_join_room(db, outsider.uuid, str(bruno.uuid))
    assert not can_join_room(db, alice.uuid, "not-a-room")
