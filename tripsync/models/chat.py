"""ORM models for chat rooms, their members and messages."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from tripsync.database import Base
from .base import CreatedAtMixin


def dm_key_for(uuid1: uuid.UUID, uuid2: uuid.UUID) -> str:
    """Return the direction-independent key of a DM pair."""

    low, high = sorted((str(uuid1), str(uuid2)))
    return f"{low}:{high}"


class ChatRoom(CreatedAtMixin, Base):
    __tablename__ = "chat_rooms"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(Enum("dm", "group", "schedule", name="chat_room_type"), nullable=False)
    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=True, index=True)
    schedule_uuid = Column(UUID(as_uuid=True), ForeignKey("schedules.uuid", ondelete="CASCADE"), nullable=True, unique=True)
    # Sorted member pair for dm rooms; NULL for every other room type.
    dm_key = Column(String(80), nullable=True, unique=True)


class ChatRoomMember(CreatedAtMixin, Base):
    __tablename__ = "chat_room_members"

    room_uuid = Column(UUID(as_uuid=True), ForeignKey("chat_rooms.uuid", ondelete="CASCADE"), primary_key=True)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_uuid = Column(UUID(as_uuid=True), ForeignKey("chat_rooms.uuid", ondelete="CASCADE"), nullable=False, index=True)
    sender_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


__all__ = ["ChatRoom", "ChatRoomMember", "ChatMessage", "dm_key_for"]
