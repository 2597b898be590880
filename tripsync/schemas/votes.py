"""Schemas for travel vote endpoints."""
from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TravelVoteCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_uuid: UUID
    title: str | None = None
    location: str | None = None
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    headcount: int | None = Field(default=None, ge=1)
    description: str | None = None
    vote_deadline: datetime | None = Field(default=None, alias="voteDeadline")


class TravelVoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    group_uuid: UUID
    creator_uuid: UUID
    title: str | None = None
    location: str
    start_date: date
    end_date: date
    headcount: int | None = None
    description: str | None = None
    vote_deadline: datetime
    schedule_uuid: UUID | None = None
    chat_room_uuid: UUID | None = None
    participant_count: int = 0
    has_participated: bool = False


class TravelVoteEnvelope(BaseModel):
    success: bool = True
    vote: TravelVoteResponse


class TravelVoteListResponse(BaseModel):
    success: bool = True
    votes: list[TravelVoteResponse]


class ParticipationRequest(BaseModel):
    participate: bool


__all__ = [
    "TravelVoteCreateRequest",
    "TravelVoteResponse",
    "TravelVoteEnvelope",
    "TravelVoteListResponse",
    "ParticipationRequest",
]
