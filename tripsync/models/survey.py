"""ORM model for individual travel preference surveys."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID

from tripsync.database import Base
from .base import CreatedAtMixin


class UserTravelSurvey(CreatedAtMixin, Base):
    __tablename__ = "user_travel_surveys"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    activity_type = Column(Integer, nullable=False, default=0)
    budget_type = Column(Integer, nullable=False, default=0)
    trip_duration = Column(Integer, nullable=False, default=0)


__all__ = ["UserTravelSurvey"]
