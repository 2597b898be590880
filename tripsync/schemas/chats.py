"""Schemas used by chat endpoints and socket payloads."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DMRoomRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    friend_uuid: UUID = Field(..., alias="friendUuid")


class DMRoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    room_uuid: UUID = Field(..., alias="roomUuid")


class MessageSendRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class ChatMessageResponse(BaseModel):
    uuid: UUID
    room_uuid: UUID
    sender_uuid: UUID
    message: str
    sent_at: datetime
    sender_name: str | None = None
    sender_picture: str | None = None


class MessageListResponse(BaseModel):
    success: bool = True
    messages: list[ChatMessageResponse]


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    deleted: int


__all__ = [
    "DMRoomRequest",
    "DMRoomResponse",
    "MessageSendRequest",
    "ChatMessageResponse",
    "MessageListResponse",
    "CleanupResponse",
]
