"""Schemas for schedule endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ScheduleCreateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    type: Literal["personal", "group"] | None = None
    group_uuid: UUID | None = None


class ScheduleUpdateRequest(BaseModel):
    """Partial schedule update; only fields present in the body are written."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    type: Literal["personal", "group"] | None = None


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    title: str
    description: str | None = None
    location: str | None = None
    start_time: datetime
    end_time: datetime
    type: Literal["personal", "group"]
    owner_uuid: UUID
    group_uuid: UUID | None = None


class ScheduleEnvelope(BaseModel):
    success: bool = True
    schedule: ScheduleResponse


class ScheduleListResponse(BaseModel):
    success: bool = True
    schedules: list[ScheduleResponse]


class ScheduleChatRoomResponse(BaseModel):
    success: bool = True
    chat_room_uuid: UUID
    title: str | None = None


__all__ = [
    "ScheduleCreateRequest",
    "ScheduleUpdateRequest",
    "ScheduleResponse",
    "ScheduleEnvelope",
    "ScheduleListResponse",
    "ScheduleChatRoomResponse",
]
