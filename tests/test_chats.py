"""Direct-message rooms, room messages and the lonely-room sweep."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from tripsync.constants import DM_NOT_FRIENDS, ROOM_FORBIDDEN
from tripsync.database import SessionLocal, create_session, transaction
from tripsync.errors import DuplicateEntryError
from tripsync.models import ChatMessage, ChatRoom, ChatRoomMember, Schedule, dm_key_for
from tripsync.services import (
    accept_friend_request,
    chat_service,
    create_dm_room_with_members,
    delete_lonely_dm_rooms,
    ensure_schedule_chat_room,
    get_or_create_dm_room,
    run_dm_cleanup,
)
from tripsync.services.chat_service import remove_room_member
from tripsync.services.friendship_service import send_friend_request


def _befriend(db, first, second) -> None:
    send_friend_request(db, requester_uuid=first.uuid, target_uuid=second.uuid)
    accept_friend_request(db, second.uuid, first.uuid)


def test_dm_room_is_shared_regardless_of_direction(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")

    first = get_or_create_dm_room(db, alice.uuid, bruno.uuid)
    second = get_or_create_dm_room(db, bruno.uuid, alice.uuid)
    assert first == second

    with SessionLocal() as session:
        rooms = session.scalars(select(ChatRoom).where(ChatRoom.type == "dm")).all()
        assert len(rooms) == 1
        assert rooms[0].dm_key == dm_key_for(bruno.uuid, alice.uuid)
        members = set(session.scalars(select(ChatRoomMember.user_uuid).where(ChatRoomMember.room_uuid == first)))
        assert members == {alice.uuid, bruno.uuid}


def test_second_dm_room_for_pair_violates_unique_key(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    create_dm_room_with_members(db, alice.uuid, bruno.uuid)

    with pytest.raises(DuplicateEntryError):
        create_dm_room_with_members(db, bruno.uuid, alice.uuid)


def test_dm_room_creation_race_returns_winner(db, user_factory, monkeypatch):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    with SessionLocal() as other:
        winner = create_dm_room_with_members(other, bruno.uuid, alice.uuid)

    real_find = chat_service.find_dm_room
    calls = {"count": 0}

    def _stale_find(session, uuid1, uuid2):
        calls["count"] += 1
        # The first lookup happens before the concurrent insert became visible.
        if calls["count"] == 1:
            return None
        return real_find(session, uuid1, uuid2)

    monkeypatch.setattr(chat_service, "find_dm_room", _stale_find)
    assert get_or_create_dm_room(db, alice.uuid, bruno.uuid) == winner
    assert calls["count"] == 2


def test_dm_room_is_rejoined_after_one_side_left(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    room_uuid = get_or_create_dm_room(db, alice.uuid, bruno.uuid)
    with transaction(db, "leave_dm"):
        remove_room_member(db, room_uuid, alice.uuid)

    assert get_or_create_dm_room(db, bruno.uuid, alice.uuid) == room_uuid
    with SessionLocal() as session:
        members = set(session.scalars(select(ChatRoomMember.user_uuid).where(ChatRoomMember.room_uuid == room_uuid)))
        assert members == {alice.uuid, bruno.uuid}


def test_delete_lonely_dm_rooms_keeps_full_rooms(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    carla = user_factory("Carla Mendes")

    kept = get_or_create_dm_room(db, alice.uuid, bruno.uuid)
    lonely = get_or_create_dm_room(db, alice.uuid, carla.uuid)
    chat_service.save_message(db, room_uuid=lonely, sender_uuid=carla.uuid, message="still there?")
    with transaction(db, "leave_dm"):
        remove_room_member(db, lonely, alice.uuid)

    assert delete_lonely_dm_rooms(db) == 1
    assert delete_lonely_dm_rooms(db) == 0

    with SessionLocal() as session:
        assert {room.uuid for room in session.scalars(select(ChatRoom))} == {kept}
        assert session.scalars(select(ChatMessage)).all() == []
        assert session.scalars(select(ChatRoomMember).where(ChatRoomMember.room_uuid == lonely)).all() == []


def test_run_dm_cleanup_uses_its_own_session(user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    with SessionLocal() as session:
        room_uuid = get_or_create_dm_room(session, alice.uuid, bruno.uuid)
        with transaction(session, "leave_dm"):
            remove_room_member(session, room_uuid, bruno.uuid)

    assert run_dm_cleanup(create_session) == 1


def test_schedule_chat_room_is_created_once(db, user_factory):
    owner = user_factory("Olga Petrov")
    start = datetime.now(timezone.utc)
    with transaction(db, "seed_schedule"):
        schedule = Schedule(title="Harbor walk", start_time=start, end_time=start + timedelta(hours=2), owner_uuid=owner.uuid)
        db.add(schedule)

    with transaction(db, "first"):
        first = ensure_schedule_chat_room(db, schedule.uuid)
    with transaction(db, "second"):
        second = ensure_schedule_chat_room(db, schedule.uuid)

    assert first == second
    with SessionLocal() as session:
        assert len(session.scalars(select(ChatRoom).where(ChatRoom.schedule_uuid == schedule.uuid)).all()) == 1


def test_open_dm_requires_friendship(authed_client, user_factory, db):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    client = authed_client(alice)

    refused = client.post("/api/chats/dm", json={"friendUuid": str(bruno.uuid)})
    assert refused.status_code == 403
    assert refused.json()["message"] == DM_NOT_FRIENDS

    _befriend(db, alice, bruno)
    opened = client.post("/api/chats/dm", json={"friendUuid": str(bruno.uuid)})
    assert opened.status_code == 200
    assert opened.json()["roomUuid"] == str(get_or_create_dm_room(db, bruno.uuid, alice.uuid))


def test_send_and_read_messages(authed_client, user_factory, notifier, db):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    outsider = user_factory("Omar Reyes")
    _befriend(db, alice, bruno)
    room_uuid = get_or_create_dm_room(db, alice.uuid, bruno.uuid)

    sent = authed_client(alice).post(f"/api/chats/{room_uuid}/messages", json={"message": "  see you at the gate  "})
    assert sent.status_code == 201
    assert sent.json()["message"] == "see you at the gate"
    assert sent.json()["sender_name"] == "Alice Han"
    room, event, payload = notifier.events[-1]
    assert (room, event) == (str(room_uuid), "receiveMessage")
    assert payload["message"] == "see you at the gate"

    assert authed_client(bruno).post(f"/api/chats/{room_uuid}/messages", json={"message": "   "}).status_code == 400

    history = authed_client(bruno).get(f"/api/chats/{room_uuid}/messages").json()["messages"]
    assert [item["message"] for item in history] == ["see you at the gate"]

    forbidden = authed_client(outsider).get(f"/api/chats/{room_uuid}/messages")
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == ROOM_FORBIDDEN


def test_message_history_returns_latest_in_order(authed_client, user_factory, db):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    room_uuid = get_or_create_dm_room(db, alice.uuid, bruno.uuid)
    for index in range(5):
        chat_service.save_message(db, room_uuid=room_uuid, sender_uuid=alice.uuid, message=f"note {index}")

    history = authed_client(bruno).get(f"/api/chats/{room_uuid}/messages", params={"limit": 3}).json()["messages"]
    assert [item["message"] for item in history] == ["note 2", "note 3", "note 4"]


def test_cleanup_endpoint_reports_deleted_rooms(authed_client, user_factory, db):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    room_uuid = get_or_create_dm_room(db, alice.uuid, bruno.uuid)
    with transaction(db, "leave_dm"):
        remove_room_member(db, room_uuid, bruno.uuid)

    response = authed_client(alice).delete("/api/chats/dm/cleanup")
    assert response.status_code == 200
    assert response.json()["deleted"] == 1
