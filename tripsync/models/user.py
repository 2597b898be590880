"""SQLAlchemy ORM models for accounts and their public profiles."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, Date, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from tripsync.database import Base
from .base import CreatedAtMixin


class User(CreatedAtMixin, Base):
    __tablename__ = "users"

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    uuid = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)
    name = Column(String(50), nullable=True)
    gender = Column(String(16), nullable=True)
    birthdate = Column(Date, nullable=True)
    paradox_flag = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    profile_picture = Column(String(512), nullable=True)

    user = relationship("User", back_populates="profile")


__all__ = ["User", "UserProfile"]
