"""ORM models for personal and group schedules."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from tripsync.database import Base
from .base import CreatedAtMixin, TimestampMixin


class Schedule(TimestampMixin, Base):
    __tablename__ = "schedules"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    type = Column(Enum("personal", "group", name="schedule_type"), nullable=False, default="personal")
    owner_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=True, index=True)


class ScheduleMember(CreatedAtMixin, Base):
    __tablename__ = "schedule_members"

    schedule_uuid = Column(UUID(as_uuid=True), ForeignKey("schedules.uuid", ondelete="CASCADE"), primary_key=True)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)


__all__ = ["Schedule", "ScheduleMember"]
