"""Friend requests, the canonical friendship row and the friend directory."""
from __future__ import annotations

from sqlalchemy import select

from tripsync.constants import FRIEND_ACCEPT_FAILED, FRIEND_REQUEST_PENDING, FRIEND_SELF_REQUEST
from tripsync.database import SessionLocal
from tripsync.models import ChatRoomMember, Friendship
from tripsync.services import accept_friend_request, are_friends, get_or_create_dm_room
from tripsync.services.friendship_service import delete_friend, send_friend_request


def test_request_accept_flow_notifies_both_sides(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")

    sent = authed_client(alice).post("/api/friends/request", json={"targetUuid": str(bruno.uuid)})
    assert sent.status_code == 201
    received = notifier.named("friendRequestReceived")
    assert received and received[0][0] == str(bruno.uuid)

    inbox = authed_client(bruno).get("/api/friends/requests/received")
    assert [item["uuid"] for item in inbox.json()["requests"]] == [str(alice.uuid)]

    accepted = authed_client(bruno).post(f"/api/friends/{alice.uuid}/accept")
    assert accepted.status_code == 200
    responded = notifier.named("friendRequestResponded")
    assert responded[0][0] == str(alice.uuid)
    assert responded[0][2]["accepted"] is True

    friends = authed_client(alice).get("/api/friends").json()["friends"]
    assert [item["uuid"] for item in friends] == [str(bruno.uuid)]
    friends = authed_client(bruno).get("/api/friends").json()["friends"]
    assert [item["uuid"] for item in friends] == [str(alice.uuid)]


def test_accept_is_symmetric_and_second_accept_fails(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    send_friend_request(db, requester_uuid=alice.uuid, target_uuid=bruno.uuid)

    assert accept_friend_request(db, bruno.uuid, alice.uuid) is True
    assert are_friends(db, alice.uuid, bruno.uuid)
    assert are_friends(db, bruno.uuid, alice.uuid)

    assert accept_friend_request(db, bruno.uuid, alice.uuid) is False
    assert accept_friend_request(db, alice.uuid, bruno.uuid) is False

    with SessionLocal() as session:
        rows = session.scalars(select(Friendship)).all()
        assert len(rows) == 1
        assert rows[0].status == "accepted"
        assert str(rows[0].user1_uuid) < str(rows[0].user2_uuid)


def test_accept_without_pending_request_is_404(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")

    response = authed_client(bruno).post(f"/api/friends/{alice.uuid}/accept")
    assert response.status_code == 404
    assert response.json()["message"] == FRIEND_ACCEPT_FAILED
    assert notifier.events == []


def test_requester_cannot_accept_own_request(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    authed_client(alice).post("/api/friends/request", json={"targetUuid": str(bruno.uuid)})

    response = authed_client(alice).post(f"/api/friends/{bruno.uuid}/accept")
    assert response.status_code == 404


def test_duplicate_and_self_requests_are_rejected(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    client = authed_client(alice)

    assert client.post("/api/friends/request", json={"targetUuid": str(alice.uuid)}).json()["message"] == FRIEND_SELF_REQUEST
    assert client.post("/api/friends/request", json={"targetUuid": str(bruno.uuid)}).status_code == 201

    reverse = authed_client(bruno).post("/api/friends/request", json={"targetUuid": str(alice.uuid)})
    assert reverse.status_code == 400
    assert reverse.json()["message"] == FRIEND_REQUEST_PENDING


def test_decline_and_cancel_remove_pending_row(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")

    authed_client(alice).post("/api/friends/request", json={"targetUuid": str(bruno.uuid)})
    assert authed_client(bruno).post(f"/api/friends/{alice.uuid}/decline").status_code == 200

    authed_client(alice).post("/api/friends/request", json={"targetUuid": str(bruno.uuid)})
    assert authed_client(alice).post("/api/friends/cancel", json={"targetUuid": str(bruno.uuid)}).status_code == 200
    assert notifier.named("friendRequestCancelled")[0][0] == str(bruno.uuid)

    with SessionLocal() as session:
        assert session.scalars(select(Friendship)).all() == []


def test_search_reports_friend_status(authed_client, user_factory, notifier):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    authed_client(alice).post("/api/friends/request", json={"targetUuid": str(bruno.uuid)})

    users = authed_client(alice).get("/api/friends/search", params={"keyword": "bruno"}).json()["users"]
    assert len(users) == 1
    assert users[0]["friendStatus"] == "pending"
    assert users[0]["friendRequester"] == str(alice.uuid)


def test_unfriend_leaves_dm_room(db, user_factory):
    alice = user_factory("Alice Han")
    bruno = user_factory("Bruno Diaz")
    send_friend_request(db, requester_uuid=alice.uuid, target_uuid=bruno.uuid)
    accept_friend_request(db, bruno.uuid, alice.uuid)
    room_uuid = get_or_create_dm_room(db, alice.uuid, bruno.uuid)

    assert delete_friend(db, alice.uuid, bruno.uuid) is True
    assert not are_friends(db, alice.uuid, bruno.uuid)

    with SessionLocal() as session:
        members = session.scalars(select(ChatRoomMember.user_uuid).where(ChatRoomMember.room_uuid == room_uuid)).all()
        assert members == [bruno.uuid]
