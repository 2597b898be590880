"""Personal travel-preference surveys."""
from __future__ import annotations

import logging
import uuid
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database import transaction
from ..models import UserTravelSurvey
from ..schemas import TravelSurveyRequest

logger = logging.getLogger(__name__)


def save_travel_survey(db: Session, *, user_uuid: UUID, payload: TravelSurveyRequest) -> UserTravelSurvey:
    survey = UserTravelSurvey(uuid=uuid.uuid4(), user_uuid=user_uuid, **payload.model_dump())
    with transaction(db, "save_travel_survey"):
        db.add(survey)
    db.refresh(survey)
    logger.info("Saved travel survey %s for user %s", survey.uuid, user_uuid)
    return survey


def get_latest_travel_survey(db: Session, *, user_uuid: UUID) -> UserTravelSurvey | None:
    stmt = (
        select(UserTravelSurvey)
        .where(UserTravelSurvey.user_uuid == user_uuid)
        .order_by(UserTravelSurvey.created_at.desc())
        .limit(1)
    )
    return db.scalar(stmt)


__all__ = ["save_travel_survey", "get_latest_travel_survey"]
