"""Schemas for friend requests and directory listings."""
from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .users import UserCard, UserCardWithStatus


class FriendTargetPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_uuid: UUID = Field(..., alias="targetUuid")


class FriendListResponse(BaseModel):
    success: bool = True
    friends: list[UserCard]


class FriendSearchResponse(BaseModel):
    success: bool = True
    users: list[UserCardWithStatus]


class ReceivedRequestsResponse(BaseModel):
    success: bool = True
    requests: list[UserCard]


__all__ = [
    "FriendTargetPayload",
    "FriendListResponse",
    "FriendSearchResponse",
    "ReceivedRequestsResponse",
]
