"""Personal and group schedules with their participants and chat rooms."""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from ..constants import (
    SCHEDULE_NOT_FOUND,
    SCHEDULE_PARTICIPANTS_ONLY,
    SCHEDULE_PAST_DATE,
    SCHEDULE_REQUIRED_FIELDS,
    SCHEDULE_TIME_ORDER,
    SCHEDULE_TIMES_REQUIRED,
)
from ..database import transaction
from ..models import ChatMessage, ChatRoom, ChatRoomMember, Schedule, ScheduleMember, TravelVote
from ..schemas import ScheduleCreateRequest, ScheduleUpdateRequest
from .chat_service import ensure_schedule_chat_room
from .group_service import require_group_member

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _check_order(start_time: datetime, end_time: datetime) -> None:
    if _as_utc(start_time) > _as_utc(end_time):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_TIME_ORDER)


def add_schedule_member(db: Session, schedule_uuid: UUID, user_uuid: UUID) -> None:
    """Stage a participant row unless it already exists. Does not commit."""

    if db.get(ScheduleMember, {"schedule_uuid": schedule_uuid, "user_uuid": user_uuid}) is None:
        db.add(ScheduleMember(schedule_uuid=schedule_uuid, user_uuid=user_uuid))
        db.flush()


def remove_schedule_member(db: Session, schedule_uuid: UUID, user_uuid: UUID) -> None:
    db.execute(
        delete(ScheduleMember).where(ScheduleMember.schedule_uuid == schedule_uuid, ScheduleMember.user_uuid == user_uuid)
    )


def delete_schedule_rows(db: Session, schedule_uuid: UUID) -> None:
    """Stage deletion of a schedule, its participants and its chat room. Does not commit."""

    room_uuids = list(db.scalars(select(ChatRoom.uuid).where(ChatRoom.schedule_uuid == schedule_uuid)))
    if room_uuids:
        db.execute(delete(ChatMessage).where(ChatMessage.room_uuid.in_(room_uuids)))
        db.execute(delete(ChatRoomMember).where(ChatRoomMember.room_uuid.in_(room_uuids)))
        db.execute(delete(ChatRoom).where(ChatRoom.uuid.in_(room_uuids)))
    db.execute(update(TravelVote).where(TravelVote.schedule_uuid == schedule_uuid).values(schedule_uuid=None))
    db.execute(delete(ScheduleMember).where(ScheduleMember.schedule_uuid == schedule_uuid))
    db.execute(delete(Schedule).where(Schedule.uuid == schedule_uuid))


def is_participant(db: Session, schedule: Schedule, user_uuid: UUID) -> bool:
    if schedule.owner_uuid == user_uuid:
        return True
    return db.get(ScheduleMember, {"schedule_uuid": schedule.uuid, "user_uuid": user_uuid}) is not None


def list_schedules(db: Session, *, user_uuid: UUID, group_uuid: UUID | None = None) -> list[Schedule]:
    if group_uuid is not None:
        require_group_member(db, group_uuid, user_uuid)
        stmt = select(Schedule).where(Schedule.group_uuid == group_uuid)
    else:
        joined = select(ScheduleMember.schedule_uuid).where(ScheduleMember.user_uuid == user_uuid)
        stmt = select(Schedule).where(or_(Schedule.owner_uuid == user_uuid, Schedule.uuid.in_(joined)))
    return list(db.scalars(stmt.order_by(Schedule.start_time.asc())))


def create_schedule(
    db: Session,
    *,
    owner_uuid: UUID,
    payload: ScheduleCreateRequest,
    today: date | None = None,
) -> Schedule:
    """Create a personal or group schedule with its owner as first participant."""

    title = (payload.title or "").strip()
    if not title or payload.start_time is None or payload.end_time is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_REQUIRED_FIELDS)
    _check_order(payload.start_time, payload.end_time)

    schedule_type = payload.type or ("group" if payload.group_uuid else "personal")
    group_uuid = payload.group_uuid if schedule_type == "group" else None
    if schedule_type == "group":
        if group_uuid is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_REQUIRED_FIELDS)
        require_group_member(db, group_uuid, owner_uuid)
        if _as_utc(payload.start_time).date() < (today or datetime.now(timezone.utc).date()):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_PAST_DATE)

    schedule_uuid = uuid.uuid4()
    with transaction(db, "create_schedule"):
        schedule = Schedule(
            uuid=schedule_uuid,
            title=title,
            description=payload.description,
            location=payload.location,
            start_time=payload.start_time,
            end_time=payload.end_time,
            type=schedule_type,
            owner_uuid=owner_uuid,
            group_uuid=group_uuid,
        )
        db.add(schedule)
        db.flush()
        add_schedule_member(db, schedule_uuid, owner_uuid)
    logger.info("Created %s schedule %s", schedule_type, schedule_uuid)
    return schedule


def _owned_schedule(db: Session, schedule_uuid: UUID, user_uuid: UUID) -> Schedule:
    schedule = db.get(Schedule, schedule_uuid)
    if schedule is None or schedule.owner_uuid != user_uuid:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SCHEDULE_NOT_FOUND)
    return schedule


def update_schedule(db: Session, *, user_uuid: UUID, schedule_uuid: UUID, payload: ScheduleUpdateRequest) -> Schedule:
    """Write only the fields present in ``payload`` on a schedule the user owns."""

    schedule = _owned_schedule(db, schedule_uuid, user_uuid)
    updates = payload.model_dump(exclude_unset=True)
    if ("start_time" in updates and updates["start_time"] is None) or ("end_time" in updates and updates["end_time"] is None):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_TIMES_REQUIRED)
    if "title" in updates and not (updates["title"] or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHEDULE_REQUIRED_FIELDS)

    _check_order(updates.get("start_time", schedule.start_time), updates.get("end_time", schedule.end_time))
    if not updates:
        return schedule

    with transaction(db, "update_schedule"):
        for field, value in updates.items():
            setattr(schedule, field, value.strip() if field == "title" else value)
    db.refresh(schedule)
    return schedule


def delete_schedule(db: Session, *, user_uuid: UUID, schedule_uuid: UUID) -> None:
    _owned_schedule(db, schedule_uuid, user_uuid)
    with transaction(db, "delete_schedule"):
        delete_schedule_rows(db, schedule_uuid)
    logger.info("Deleted schedule %s", schedule_uuid)


def get_schedule_chat_room(db: Session, *, user_uuid: UUID, schedule_uuid: UUID) -> tuple[UUID, str]:
    """Return ``(room_uuid, title)`` for a participant, creating the room on first use."""

    schedule = db.get(Schedule, schedule_uuid)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SCHEDULE_NOT_FOUND)
    if not is_participant(db, schedule, user_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=SCHEDULE_PARTICIPANTS_ONLY)
    with transaction(db, "get_schedule_chat_room"):
        room_uuid = ensure_schedule_chat_room(db, schedule_uuid)
    return room_uuid, cast(str, schedule.title)


__all__ = [
    "add_schedule_member",
    "remove_schedule_member",
    "delete_schedule_rows",
    "is_participant",
    "list_schedules",
    "create_schedule",
    "update_schedule",
    "delete_schedule",
    "get_schedule_chat_room",
]
