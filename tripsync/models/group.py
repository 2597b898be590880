"""ORM models for travel groups, their members, surveys and invitations."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from tripsync.database import Base
from .base import CreatedAtMixin, TimestampMixin


class Group(TimestampMixin, Base):
    __tablename__ = "group_info"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    group_icon = Column(String(512), nullable=True)
    group_picture = Column(String(512), nullable=True)
    visibility = Column(Enum("public", "private", name="group_visibility"), nullable=False, default="public")
    group_leader_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    survey = relationship("GroupSurvey", back_populates="group", uselist=False, cascade="all, delete-orphan")


class GroupMember(CreatedAtMixin, Base):
    __tablename__ = "group_members"

    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), primary_key=True)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)
    role = Column(Enum("leader", "member", name="group_member_role"), nullable=False, default="member")

    group = relationship("Group", back_populates="members")


class GroupSurvey(Base):
    __tablename__ = "group_surveys"

    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), primary_key=True)
    activity_type = Column(Integer, nullable=False, default=0)
    budget_type = Column(Integer, nullable=False, default=0)
    trip_duration = Column(Integer, nullable=False, default=0)

    group = relationship("Group", back_populates="survey")


class GroupInvite(TimestampMixin, Base):
    __tablename__ = "group_invites"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=False, index=True)
    inviter_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    invited_user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum("pending", "accepted", "declined", name="group_invite_status"),
        nullable=False,
        default="pending",
    )

    __table_args__ = (UniqueConstraint("group_uuid", "invited_user_uuid", name="uq_group_invite_target"),)


__all__ = ["Group", "GroupMember", "GroupSurvey", "GroupInvite"]
