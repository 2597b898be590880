"""Schemas for group endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GroupSurveyPayload(BaseModel):
    activity_type: int | None = None
    budget_type: int | None = None
    trip_duration: int | None = None


class GroupInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    name: str
    description: str | None = None
    group_icon: str | None = None
    group_picture: str | None = None
    visibility: Literal["public", "private"]
    group_leader_uuid: UUID
    created_at: datetime | None = None
    chat_room_uuid: UUID | None = None


class GroupSearchRequest(BaseModel):
    name: str = ""


class GroupJoinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_uuid: UUID = Field(..., alias="groupUuid")


class GroupMemberResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uuid: UUID
    name: str | None = None
    role: Literal["leader", "member"]
    profile_picture: str | None = Field(default=None, alias="profilePicture")


class GroupMembersResponse(BaseModel):
    members: list[GroupMemberResponse]


class GroupChatRoomResponse(BaseModel):
    chat_room_uuid: UUID


class GroupInviteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    invited_user_uuid: UUID = Field(..., alias="invitedUserUuid")


class GroupInviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    uuid: UUID = Field(..., alias="inviteUuid")
    group_uuid: UUID = Field(..., alias="groupUuid")
    inviter_uuid: UUID = Field(..., alias="inviterUuid")
    invited_user_uuid: UUID = Field(..., alias="invitedUserUuid")
    status: Literal["pending", "accepted", "declined"]


__all__ = [
    "GroupSurveyPayload",
    "GroupInfo",
    "GroupSearchRequest",
    "GroupJoinRequest",
    "GroupMemberResponse",
    "GroupMembersResponse",
    "GroupChatRoomResponse",
    "GroupInviteRequest",
    "GroupInviteResponse",
]
