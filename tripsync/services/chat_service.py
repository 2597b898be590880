"""Chat rooms, room membership and message persistence."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..constants import ROOM_FORBIDDEN, ROOM_NOT_FOUND
from ..database import transaction
from ..errors import DuplicateEntryError
from ..models import (
    ChatMessage,
    ChatRoom,
    ChatRoomMember,
    Schedule,
    ScheduleMember,
    User,
    UserProfile,
    dm_key_for,
)
from ..schemas import ChatMessageResponse
from .media_service import format_image_url

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 100


def add_room_member(db: Session, room_uuid: UUID, user_uuid: UUID) -> None:
    """Stage a membership row unless it already exists. Does not commit."""

    existing = db.get(ChatRoomMember, {"room_uuid": room_uuid, "user_uuid": user_uuid})
    if existing is None:
        db.add(ChatRoomMember(room_uuid=room_uuid, user_uuid=user_uuid))
        db.flush()


def remove_room_member(db: Session, room_uuid: UUID, user_uuid: UUID) -> None:
    db.execute(delete(ChatRoomMember).where(ChatRoomMember.room_uuid == room_uuid, ChatRoomMember.user_uuid == user_uuid))


def create_dm_room_with_members(db: Session, uuid1: UUID, uuid2: UUID) -> UUID:
    """Create a DM room holding both users.

    The room carries the sorted-pair ``dm_key``; a second room for the same
    pair violates its unique constraint and raises ``DuplicateEntryError``.
    """

    room_uuid = uuid.uuid4()
    with transaction(db, "create_dm_room_with_members"):
        db.add(ChatRoom(uuid=room_uuid, type="dm", dm_key=dm_key_for(uuid1, uuid2)))
        db.flush()
        db.add_all(
            [
                ChatRoomMember(room_uuid=room_uuid, user_uuid=uuid1),
                ChatRoomMember(room_uuid=room_uuid, user_uuid=uuid2),
            ]
        )
    logger.info("Created DM room %s", room_uuid)
    return room_uuid


def create_group_room_with_leader(db: Session, group_uuid: UUID, leader_uuid: UUID) -> UUID:
    room_uuid = uuid.uuid4()
    with transaction(db, "create_group_room_with_leader"):
        db.add(ChatRoom(uuid=room_uuid, type="group", group_uuid=group_uuid))
        db.flush()
        db.add(ChatRoomMember(room_uuid=room_uuid, user_uuid=leader_uuid))
    logger.info("Created group room %s for group %s", room_uuid, group_uuid)
    return room_uuid


def find_dm_room(db: Session, uuid1: UUID, uuid2: UUID) -> ChatRoom | None:
    stmt = select(ChatRoom).where(ChatRoom.type == "dm", ChatRoom.dm_key == dm_key_for(uuid1, uuid2))
    return db.scalar(stmt)


def get_or_create_dm_room(db: Session, user_uuid: UUID, friend_uuid: UUID) -> UUID:
    """Return the DM room between two users, creating it when absent.

    Lookups use the sorted pair so the result does not depend on who asks.
    When a concurrent request wins the insert, its room is returned. A room
    one side has left is rejoined rather than replaced.
    """

    existing = find_dm_room(db, user_uuid, friend_uuid)
    if existing is not None:
        room_uuid = cast(UUID, existing.uuid)
        with transaction(db, "get_or_create_dm_room"):
            add_room_member(db, room_uuid, user_uuid)
            add_room_member(db, room_uuid, friend_uuid)
        return room_uuid
    try:
        return create_dm_room_with_members(db, user_uuid, friend_uuid)
    except DuplicateEntryError:
        winner = find_dm_room(db, user_uuid, friend_uuid)
        if winner is None:
            raise
        logger.info("DM room for %s already created concurrently", dm_key_for(user_uuid, friend_uuid))
        return cast(UUID, winner.uuid)


def get_schedule_chat_room(db: Session, schedule_uuid: UUID) -> ChatRoom | None:
    stmt = select(ChatRoom).where(ChatRoom.type == "schedule", ChatRoom.schedule_uuid == schedule_uuid)
    return db.scalar(stmt)


def ensure_schedule_chat_room(db: Session, schedule_uuid: UUID) -> UUID:
    """Return the schedule's chat room uuid, staging a new room when none exists.

    Runs inside the caller's transaction and does not commit.
    """

    existing = get_schedule_chat_room(db, schedule_uuid)
    if existing is not None:
        return cast(UUID, existing.uuid)
    room_uuid = uuid.uuid4()
    db.add(ChatRoom(uuid=room_uuid, type="schedule", schedule_uuid=schedule_uuid))
    db.flush()
    return room_uuid


def get_group_chat_room(db: Session, group_uuid: UUID) -> ChatRoom | None:
    stmt = select(ChatRoom).where(ChatRoom.type == "group", ChatRoom.group_uuid == group_uuid)
    return db.scalar(stmt)


def delete_lonely_dm_rooms(db: Session) -> int:
    """Remove DM rooms left with one member or none, returning how many were deleted."""

    member_count = func.count(ChatRoomMember.user_uuid)
    stmt = (
        select(ChatRoom.uuid)
        .outerjoin(ChatRoomMember, ChatRoomMember.room_uuid == ChatRoom.uuid)
        .where(ChatRoom.type == "dm")
        .group_by(ChatRoom.uuid)
        .having(member_count <= 1)
    )
    lonely = list(db.scalars(stmt))
    if not lonely:
        db.rollback()
        return 0

    with transaction(db, "delete_lonely_dm_rooms"):
        db.execute(delete(ChatMessage).where(ChatMessage.room_uuid.in_(lonely)))
        db.execute(delete(ChatRoomMember).where(ChatRoomMember.room_uuid.in_(lonely)))
        db.execute(delete(ChatRoom).where(ChatRoom.uuid.in_(lonely)))
    logger.info("Deleted %d lonely DM rooms", len(lonely))
    return len(lonely)


def is_room_member(db: Session, room: ChatRoom, user_uuid: UUID) -> bool:
    if room.type == "schedule":
        schedule = db.get(Schedule, room.schedule_uuid)
        if schedule is None:
            return False
        if schedule.owner_uuid == user_uuid:
            return True
        return db.get(ScheduleMember, {"schedule_uuid": schedule.uuid, "user_uuid": user_uuid}) is not None
    return db.get(ChatRoomMember, {"room_uuid": room.uuid, "user_uuid": user_uuid}) is not None


def require_room_access(db: Session, room_uuid: UUID, user_uuid: UUID) -> ChatRoom:
    room = db.get(ChatRoom, room_uuid)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ROOM_NOT_FOUND)
    if not is_room_member(db, room, user_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ROOM_FORBIDDEN)
    return room


def _message_query():
    return (
        select(ChatMessage, UserProfile.name, UserProfile.profile_picture)
        .join(User, User.uuid == ChatMessage.sender_uuid)
        .outerjoin(UserProfile, UserProfile.uuid == User.uuid)
    )


def _to_response(message: ChatMessage, name: str | None, picture: str | None) -> ChatMessageResponse:
    return ChatMessageResponse(
        uuid=cast(UUID, message.uuid),
        room_uuid=cast(UUID, message.room_uuid),
        sender_uuid=cast(UUID, message.sender_uuid),
        message=cast(str, message.message),
        sent_at=message.sent_at,
        sender_name=name,
        sender_picture=format_image_url(picture),
    )


def save_message(db: Session, *, room_uuid: UUID, sender_uuid: UUID, message: str) -> ChatMessageResponse:
    message_uuid = uuid.uuid4()
    with transaction(db, "save_message"):
        db.add(
            ChatMessage(
                uuid=message_uuid,
                room_uuid=room_uuid,
                sender_uuid=sender_uuid,
                message=message,
                sent_at=datetime.now(timezone.utc),
            )
        )
    row = db.execute(_message_query().where(ChatMessage.uuid == message_uuid)).one()
    return _to_response(*row)


def list_messages(db: Session, *, room_uuid: UUID, limit: int = DEFAULT_MESSAGE_LIMIT) -> list[ChatMessageResponse]:
    """Return the newest ``limit`` messages of a room, oldest first."""

    stmt = _message_query().where(ChatMessage.room_uuid == room_uuid).order_by(ChatMessage.sent_at.desc()).limit(limit)
    rows = list(db.execute(stmt))
    rows.reverse()
    return [_to_response(*row) for row in rows]


__all__ = [
    "add_room_member",
    "remove_room_member",
    "create_dm_room_with_members",
    "create_group_room_with_leader",
    "find_dm_room",
    "get_or_create_dm_room",
    "get_schedule_chat_room",
    "ensure_schedule_chat_room",
    "get_group_chat_room",
    "delete_lonely_dm_rooms",
    "is_room_member",
    "require_room_access",
    "save_message",
    "list_messages",
]
