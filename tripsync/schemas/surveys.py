"""Schemas for personal travel surveys."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TravelSurveyRequest(BaseModel):
    activity_type: int = Field(..., ge=0)
    budget_type: int = Field(..., ge=0)
    trip_duration: int = Field(..., ge=0)


class TravelSurveyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    user_uuid: UUID
    activity_type: int
    budget_type: int
    trip_duration: int
    created_at: datetime | None = None


class TravelSurveyEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    survey: TravelSurveyResponse


__all__ = ["TravelSurveyRequest", "TravelSurveyResponse", "TravelSurveyEnvelope"]
