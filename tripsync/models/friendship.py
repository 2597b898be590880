"""ORM model for friendships stored as one canonical row per user pair."""
from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from tripsync.database import Base
from .base import TimestampMixin


class Friendship(TimestampMixin, Base):
    """A pending or accepted relation between ``user1_uuid`` < ``user2_uuid``."""

    __tablename__ = "friendships"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user1_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    user2_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    requester_uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    status = Column(Enum("pending", "accepted", name="friendship_status"), nullable=False, default="pending")

    __table_args__ = (
        UniqueConstraint("user1_uuid", "user2_uuid", name="uq_friendship_pair"),
        CheckConstraint("user1_uuid <> user2_uuid", name="ck_friendship_distinct"),
    )

    def other(self, user_uuid: uuid.UUID) -> uuid.UUID:
        return self.user2_uuid if self.user1_uuid == user_uuid else self.user1_uuid


__all__ = ["Friendship"]
