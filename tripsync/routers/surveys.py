"""Personal travel survey routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..constants import SURVEY_NOT_FOUND, SURVEY_SAVED
from ..database import get_session
from ..models import User
from ..schemas import TravelSurveyEnvelope, TravelSurveyRequest, TravelSurveyResponse
from ..services import get_current_user, get_latest_travel_survey, save_travel_survey

router = APIRouter(prefix="/surveys", tags=["surveys"])


@router.post("", response_model=TravelSurveyEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_survey(
    payload: TravelSurveyRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> TravelSurveyEnvelope:
    survey = save_travel_survey(db, user_uuid=cast(UUID, current_user.uuid), payload=payload)
    return TravelSurveyEnvelope(message=SURVEY_SAVED, survey=TravelSurveyResponse.model_validate(survey))


@router.get("/latest", response_model=TravelSurveyEnvelope)
async def latest_survey(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> TravelSurveyEnvelope:
    survey = get_latest_travel_survey(db, user_uuid=cast(UUID, current_user.uuid))
    if survey is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SURVEY_NOT_FOUND)
    return TravelSurveyEnvelope(survey=TravelSurveyResponse.model_validate(survey))


__all__ = ["router"]
