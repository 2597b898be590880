"""Travel votes: the create bundle, listing and participation."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

import pytest
from sqlalchemy import insert, select

from tripsync.constants import GENERIC_SERVER_ERROR, VOTE_ALREADY_JOINED, VOTE_DATE_ORDER, VOTE_MEMBERS_ONLY
from tripsync.database import SessionLocal
from tripsync.errors import DuplicateEntryError
from tripsync.models import ChatRoom, Schedule, ScheduleMember, TravelVote, TravelVoteParticipant
from tripsync.services import create_group, create_group_room_with_leader, create_travel_vote, vote_service
from tripsync.services.group_service import join_group


def _group_with(db, leader, *members):
    group = create_group(db, "Alps Hikers", None, "public", leader.uuid)
    create_group_room_with_leader(db, group.uuid, leader.uuid)
    for member in members:
        join_group(db, group_uuid=group.uuid, user_uuid=member.uuid)
    return group


def _vote_body(group_uuid, **overrides):
    start = date.today() + timedelta(days=30)
    body = {
        "group_uuid": str(group_uuid),
        "title": "Summer hut trip",
        "location": "Zermatt",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=3)).isoformat(),
        "headcount": 6,
        "description": "Three nights in the mountains",
        "voteDeadline": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
    }
    body.update(overrides)
    return body


def test_create_vote_builds_schedule_participant_and_room(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    group = _group_with(db, leader)

    response = authed_client(leader).post("/api/votes", json=_vote_body(group.uuid))
    assert response.status_code == 201
    vote = response.json()["vote"]
    assert vote["participant_count"] == 1
    assert vote["has_participated"] is True
    assert vote["chat_room_uuid"] is not None
    assert notifier.named("travelVoteCreated")[0][0] == str(group.uuid)

    with SessionLocal() as session:
        stored = session.get(TravelVote, UUID(vote["uuid"]))
        schedule = session.get(Schedule, stored.schedule_uuid)
        assert schedule.type == "group"
        assert schedule.group_uuid == group.uuid
        assert schedule.title == "Summer hut trip"
        assert schedule.start_time.time() == time.min
        assert schedule.end_time.time() == time(23, 59, 59)
        assert session.get(ScheduleMember, {"schedule_uuid": schedule.uuid, "user_uuid": leader.uuid}) is not None
        assert session.get(TravelVoteParticipant, {"vote_uuid": stored.uuid, "user_uuid": leader.uuid}) is not None
        room = session.scalar(select(ChatRoom).where(ChatRoom.schedule_uuid == schedule.uuid))
        assert str(room.uuid) == vote["chat_room_uuid"]


def test_vote_without_title_uses_location_for_schedule(db, user_factory):
    leader = user_factory("Lena Ortiz")
    group = _group_with(db, leader)
    start = date.today() + timedelta(days=10)

    vote = create_travel_vote(
        db, group.uuid, leader.uuid, None, "Porto", start, start, None, None, datetime.now(timezone.utc) + timedelta(days=1)
    )
    schedule = db.get(Schedule, vote.schedule_uuid)
    assert schedule.title == "Porto"


def test_create_vote_rolls_back_everything_on_failure(authed_client, user_factory, notifier, db, monkeypatch):
    leader = user_factory("Lena Ortiz")
    group = _group_with(db, leader)

    def _broken_participant(*args, **kwargs):
        raise RuntimeError("participants table unavailable")

    monkeypatch.setattr(vote_service, "_insert_participant", _broken_participant)
    response = authed_client(leader).post("/api/votes", json=_vote_body(group.uuid))
    assert response.status_code == 500
    assert response.json()["message"] == GENERIC_SERVER_ERROR
    assert notifier.events == []

    with SessionLocal() as session:
        assert session.scalars(select(TravelVote)).all() == []
        assert session.scalars(select(Schedule)).all() == []
        assert session.scalars(select(ScheduleMember)).all() == []
        assert session.scalars(select(ChatRoom).where(ChatRoom.type == "schedule")).all() == []


def test_create_vote_validation(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    outsider = user_factory("Omar Reyes")
    group = _group_with(db, leader)

    missing = authed_client(leader).post("/api/votes", json=_vote_body(group.uuid, location="  "))
    assert missing.status_code == 400

    reversed_dates = _vote_body(group.uuid)
    reversed_dates["startDate"], reversed_dates["endDate"] = reversed_dates["endDate"], reversed_dates["startDate"]
    backwards = authed_client(leader).post("/api/votes", json=reversed_dates)
    assert backwards.status_code == 400
    assert backwards.json()["message"] == VOTE_DATE_ORDER

    stranger = authed_client(outsider).post("/api/votes", json=_vote_body(group.uuid))
    assert stranger.status_code == 403
    assert stranger.json()["message"] == VOTE_MEMBERS_ONLY


def test_list_votes_hides_closed_votes(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    member = user_factory("Mika Saari")
    group = _group_with(db, leader, member)
    client = authed_client(leader)

    client.post("/api/votes", json=_vote_body(group.uuid, title="Open trip"))
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    client.post("/api/votes", json=_vote_body(group.uuid, title="Closed trip", voteDeadline=past))

    votes = authed_client(member).get("/api/votes", params={"group_uuid": str(group.uuid)}).json()["votes"]
    assert [item["title"] for item in votes] == ["Open trip"]
    assert votes[0]["participant_count"] == 1
    assert votes[0]["has_participated"] is False


def test_participation_join_and_leave_updates_schedule(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    member = user_factory("Mika Saari")
    group = _group_with(db, leader, member)
    vote = authed_client(leader).post("/api/votes", json=_vote_body(group.uuid)).json()["vote"]

    joined = authed_client(member).post(f"/api/votes/{vote['uuid']}/participate", json={"participate": True})
    assert joined.status_code == 200
    update = notifier.named("voteParticipationUpdated")[-1][2]
    assert update["participant_count"] == 2
    assert update["participate"] is True

    again = authed_client(member).post(f"/api/votes/{vote['uuid']}/participate", json={"participate": True})
    assert again.status_code == 400
    assert again.json()["message"] == VOTE_ALREADY_JOINED

    schedule_room = authed_client(member).get(f"/api/schedules/{vote['schedule_uuid']}/chat-room")
    assert schedule_room.json()["chat_room_uuid"] == vote["chat_room_uuid"]

    left = authed_client(member).post(f"/api/votes/{vote['uuid']}/participate", json={"participate": False})
    assert left.status_code == 200
    assert notifier.named("voteParticipationUpdated")[-1][2]["participant_count"] == 1
    assert notifier.named("travelVoteDeleted") == []

    with SessionLocal() as session:
        members = session.scalars(select(ScheduleMember.user_uuid)).all()
        assert members == [leader.uuid]


def test_last_participant_leaving_deletes_vote_and_schedule(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    group = _group_with(db, leader)
    vote = authed_client(leader).post("/api/votes", json=_vote_body(group.uuid)).json()["vote"]

    left = authed_client(leader).post(f"/api/votes/{vote['uuid']}/participate", json={"participate": False})
    assert left.status_code == 200
    deleted = notifier.named("travelVoteDeleted")
    assert deleted and deleted[0][0] == str(group.uuid)
    assert notifier.named("voteParticipationUpdated")[-1][2]["participant_count"] == 0

    with SessionLocal() as session:
        assert session.scalars(select(TravelVote)).all() == []
        assert session.scalars(select(Schedule)).all() == []
        assert session.scalars(select(ChatRoom).where(ChatRoom.type == "schedule")).all() == []


def test_duplicate_participant_insert_rolls_back_vote_and_schedule(db, user_factory, monkeypatch):
    leader = user_factory("Lena Ortiz")
    group = _group_with(db, leader)
    real_insert = vote_service._insert_participant

    def _insert_twice(session, vote_uuid, user_uuid):
        real_insert(session, vote_uuid, user_uuid)
        session.execute(insert(TravelVoteParticipant).values(vote_uuid=vote_uuid, user_uuid=user_uuid))

    monkeypatch.setattr(vote_service, "_insert_participant", _insert_twice)
    start = date.today() + timedelta(days=12)
    with pytest.raises(DuplicateEntryError):
        create_travel_vote(
            db, group.uuid, leader.uuid, "Twice", "Lyon", start, start, 2, None, datetime.now(timezone.utc) + timedelta(days=1)
        )

    with SessionLocal() as session:
        assert session.scalars(select(TravelVote)).all() == []
        assert session.scalars(select(Schedule)).all() == []
        assert session.scalars(select(TravelVoteParticipant)).all() == []
