"""Schemas for profile endpoints."""
from __future__ import annotations

from datetime import date
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uuid: UUID
    email: str
    name: str | None = None
    gender: str | None = None
    birthdate: date | None = None
    paradox_flag: bool = Field(default=False, alias="paradoxFlag")
    profile_picture: str | None = Field(default=None, alias="profilePicture")


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; only fields present in the body are written."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    profile_picture: str | None = Field(default=None, alias="profilePicture")


class PasswordChangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")


class UserCard(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uuid: UUID
    email: str
    name: str | None = None
    profile_picture: str | None = Field(default=None, alias="profilePicture")


class UserCardWithStatus(UserCard):
    friend_status: Literal["pending", "accepted"] | None = Field(default=None, alias="friendStatus")
    friend_requester: UUID | None = Field(default=None, alias="friendRequester")


class ProfileEnvelope(BaseModel):
    success: bool = True
    profile: ProfileResponse


class UserCardEnvelope(BaseModel):
    success: bool = True
    profile: UserCardWithStatus


__all__ = [
    "ProfileResponse",
    "ProfileUpdateRequest",
    "PasswordChangeRequest",
    "UserCard",
    "UserCardWithStatus",
    "ProfileEnvelope",
    "UserCardEnvelope",
]
