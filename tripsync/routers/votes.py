"""Travel vote API routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..constants import VOTE_JOINED, VOTE_LEFT
from ..database import get_session
from ..models import User
from ..schemas import (
    ParticipationRequest,
    SuccessResponse,
    TravelVoteCreateRequest,
    TravelVoteEnvelope,
    TravelVoteListResponse,
)
from ..services import Notifier, create_travel_vote, get_current_user, get_notifier, participate_in_travel_vote
from ..services.vote_service import list_travel_votes, validate_vote_request

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("", response_model=TravelVoteEnvelope, status_code=status.HTTP_201_CREATED)
async def create_vote(
    payload: TravelVoteCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> TravelVoteEnvelope:
    creator_uuid = cast(UUID, current_user.uuid)
    validate_vote_request(db, creator_uuid=creator_uuid, payload=payload)
    vote = create_travel_vote(
        db,
        payload.group_uuid,
        creator_uuid,
        payload.title,
        (payload.location or "").strip(),
        payload.start_date,
        payload.end_date,
        payload.headcount,
        payload.description,
        payload.vote_deadline,
    )
    await notifier.publish(payload.group_uuid, "travelVoteCreated", {"voteUuid": vote.uuid, "groupUuid": payload.group_uuid})
    return TravelVoteEnvelope(vote=vote)


@router.get("", response_model=TravelVoteListResponse)
async def read_votes(
    group_uuid: UUID = Query(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> TravelVoteListResponse:
    return TravelVoteListResponse(votes=list_travel_votes(db, group_uuid=group_uuid, user_uuid=cast(UUID, current_user.uuid)))


@router.post("/{vote_uuid}/participate", response_model=SuccessResponse)
async def participate(
    vote_uuid: UUID,
    payload: ParticipationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    user_uuid = cast(UUID, current_user.uuid)
    result = participate_in_travel_vote(db, vote_uuid=vote_uuid, user_uuid=user_uuid, participate=payload.participate)

    if result.vote_deleted:
        await notifier.publish(result.group_uuid, "travelVoteDeleted", {"voteUuid": vote_uuid, "groupUuid": result.group_uuid})
    await notifier.publish(
        result.group_uuid,
        "voteParticipationUpdated",
        {
            "voteUuid": vote_uuid,
            "participant_count": result.participant_count,
            "userUuid": user_uuid,
            "participate": payload.participate,
        },
    )
    return SuccessResponse(message=VOTE_JOINED if payload.participate else VOTE_LEFT)


__all__ = ["router"]
