"""Personal and group schedules plus personal travel surveys."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from tripsync.constants import (
    GROUP_NOT_MEMBER,
    SCHEDULE_NOT_FOUND,
    SCHEDULE_PAST_DATE,
    SCHEDULE_PARTICIPANTS_ONLY,
    SCHEDULE_TIME_ORDER,
    SURVEY_NOT_FOUND,
    SURVEY_SAVED,
)
from tripsync.services import create_group


def _window(days_ahead=3, hours=4):
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=days_ahead)
    return start.isoformat(), (start + timedelta(hours=hours)).isoformat()


def test_personal_schedule_lifecycle(authed_client, user_factory, notifier):
    owner = user_factory("Sara Voss")
    client = authed_client(owner)
    start, end = _window()

    created = client.post("/api/schedules", json={"title": "Museum day", "location": "Louvre", "start_time": start, "end_time": end})
    assert created.status_code == 201
    schedule = created.json()["schedule"]
    assert schedule["type"] == "personal"
    assert schedule["group_uuid"] is None
    assert notifier.named("scheduleCreated") == []

    listed = client.get("/api/schedules").json()["schedules"]
    assert [item["uuid"] for item in listed] == [schedule["uuid"]]

    patched = client.patch(f"/api/schedules/{schedule['uuid']}", json={"title": "Museum morning"})
    assert patched.status_code == 200
    body = patched.json()["schedule"]
    assert body["title"] == "Museum morning"
    assert body["location"] == "Louvre"

    cleared = client.patch(f"/api/schedules/{schedule['uuid']}", json={"location": None}).json()["schedule"]
    assert cleared["location"] is None
    assert cleared["title"] == "Museum morning"

    too_early = (datetime.fromisoformat(start) - timedelta(days=1)).isoformat()
    backwards = client.patch(f"/api/schedules/{schedule['uuid']}", json={"end_time": too_early})
    assert backwards.status_code == 400
    assert backwards.json()["message"] == SCHEDULE_TIME_ORDER

    room = client.get(f"/api/schedules/{schedule['uuid']}/chat-room").json()
    assert room["title"] == "Museum morning"
    again = client.get(f"/api/schedules/{schedule['uuid']}/chat-room").json()
    assert again["chat_room_uuid"] == room["chat_room_uuid"]

    assert client.delete(f"/api/schedules/{schedule['uuid']}").status_code == 200
    assert client.get("/api/schedules").json()["schedules"] == []


def test_only_owner_can_modify_schedule(authed_client, user_factory, notifier):
    owner = user_factory("Sara Voss")
    stranger = user_factory("Omar Reyes")
    start, end = _window()
    schedule = authed_client(owner).post(
        "/api/schedules", json={"title": "Secret plan", "start_time": start, "end_time": end}
    ).json()["schedule"]

    client = authed_client(stranger)
    patched = client.patch(f"/api/schedules/{schedule['uuid']}", json={"title": "Hijacked"})
    assert patched.status_code == 404
    assert patched.json()["message"] == SCHEDULE_NOT_FOUND
    assert client.delete(f"/api/schedules/{schedule['uuid']}").status_code == 404

    room = client.get(f"/api/schedules/{schedule['uuid']}/chat-room")
    assert room.status_code == 403
    assert room.json()["message"] == SCHEDULE_PARTICIPANTS_ONLY


def test_schedule_requires_title_and_ordered_times(authed_client, user_factory):
    client = authed_client(user_factory("Sara Voss"))
    start, end = _window()

    assert client.post("/api/schedules", json={"start_time": start, "end_time": end}).status_code == 400
    backwards = client.post("/api/schedules", json={"title": "Oops", "start_time": end, "end_time": start})
    assert backwards.status_code == 400
    assert backwards.json()["message"] == SCHEDULE_TIME_ORDER


def test_group_schedule_rules_and_event(authed_client, user_factory, notifier, db):
    leader = user_factory("Lena Ortiz")
    outsider = user_factory("Omar Reyes")
    group = create_group(db, "Rome Runners", None, "public", leader.uuid)
    start, end = _window()

    created = authed_client(leader).post(
        "/api/schedules",
        json={"title": "Colosseum tour", "start_time": start, "end_time": end, "type": "group", "group_uuid": str(group.uuid)},
    )
    assert created.status_code == 201
    event_room, _, payload = notifier.named("scheduleCreated")[0]
    assert event_room == str(group.uuid)
    assert payload["title"] == "Colosseum tour"

    past_start, past_end = _window(days_ahead=-2)
    past = authed_client(leader).post(
        "/api/schedules",
        json={"title": "Too late", "start_time": past_start, "end_time": past_end, "group_uuid": str(group.uuid)},
    )
    assert past.status_code == 400
    assert past.json()["message"] == SCHEDULE_PAST_DATE

    stranger = authed_client(outsider).post(
        "/api/schedules",
        json={"title": "Gatecrash", "start_time": start, "end_time": end, "group_uuid": str(group.uuid)},
    )
    assert stranger.status_code == 403
    assert stranger.json()["message"] == GROUP_NOT_MEMBER

    listed = authed_client(leader).get("/api/schedules", params={"group_uuid": str(group.uuid)}).json()["schedules"]
    assert [item["title"] for item in listed] == ["Colosseum tour"]


def test_travel_survey_roundtrip(authed_client, user_factory):
    client = authed_client(user_factory("Sara Voss"))

    missing = client.get("/api/surveys/latest")
    assert missing.status_code == 404
    assert missing.json()["message"] == SURVEY_NOT_FOUND

    saved = client.post("/api/surveys", json={"activity_type": 3, "budget_type": 2, "trip_duration": 5})
    assert saved.status_code == 201
    assert saved.json()["message"] == SURVEY_SAVED

    latest = client.get("/api/surveys/latest").json()["survey"]
    assert (latest["activity_type"], latest["budget_type"], latest["trip_duration"]) == (3, 2, 5)

    assert client.post("/api/surveys", json={"activity_type": -1, "budget_type": 0, "trip_duration": 0}).status_code == 400
