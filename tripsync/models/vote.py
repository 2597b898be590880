"""ORM models for group travel votes and their participants."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from tripsync.database import Base
from .base import CreatedAtMixin


class TravelVote(CreatedAtMixin, Base):
    __tablename__ = "travel_votes"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_uuid = Column(UUID(as_uuid=True), ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=False, index=True)
    creator_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    title = Column(String(100), nullable=True)
    location = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    headcount = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    vote_deadline = Column(DateTime(timezone=True), nullable=False)
    schedule_uuid = Column(UUID(as_uuid=True), ForeignKey("schedules.uuid", ondelete="SET NULL"), nullable=True)


class TravelVoteParticipant(CreatedAtMixin, Base):
    __tablename__ = "travel_vote_participants"

    vote_uuid = Column(UUID(as_uuid=True), ForeignKey("travel_votes.uuid", ondelete="CASCADE"), primary_key=True)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)


__all__ = ["TravelVote", "TravelVoteParticipant"]
