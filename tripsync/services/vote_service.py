"""Travel votes and the schedule, participants and chat room bundled with each vote."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..constants import (
    VOTE_ALREADY_JOINED,
    VOTE_DATE_ORDER,
    VOTE_MEMBERS_ONLY,
    VOTE_NOT_FOUND,
    VOTE_NOT_JOINED,
    VOTE_REQUIRED_FIELDS,
)
from ..database import transaction
from ..models import Schedule, TravelVote, TravelVoteParticipant
from ..schemas import TravelVoteCreateRequest, TravelVoteResponse
from .chat_service import ensure_schedule_chat_room, get_schedule_chat_room
from .group_service import is_group_member
from .schedule_service import add_schedule_member, delete_schedule_rows, remove_schedule_member

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True, slots=True)
class ParticipationResult:
    """Outcome of joining or leaving a vote."""

    vote_uuid: UUID
    group_uuid: UUID
    participant_count: int
    vote_deleted: bool = False


def _insert_schedule(
    db: Session,
    *,
    schedule_uuid: UUID,
    group_uuid: UUID,
    creator_uuid: UUID,
    title: str,
    location: str,
    start_date: date,
    end_date: date,
    description: str | None,
) -> None:
    db.add(
        Schedule(
            uuid=schedule_uuid,
            title=title,
            description=description,
            location=location,
            start_time=datetime.combine(start_date, time.min, tzinfo=timezone.utc),
            end_time=datetime.combine(end_date, END_OF_DAY, tzinfo=timezone.utc),
            type="group",
            owner_uuid=creator_uuid,
            group_uuid=group_uuid,
        )
    )
    db.flush()


def _insert_participant(db: Session, vote_uuid: UUID, user_uuid: UUID) -> None:
    db.add(TravelVoteParticipant(vote_uuid=vote_uuid, user_uuid=user_uuid))
    db.flush()


def create_travel_vote(
    db: Session,
    group_uuid: UUID,
    creator_uuid: UUID,
    title: str | None,
    location: str,
    start_date: date,
    end_date: date,
    headcount: int | None,
    description: str | None,
    vote_deadline: datetime,
) -> TravelVoteResponse:
    """Create a vote with its backing group schedule in one transaction.

    The schedule and the vote get their uuids up front. The creator becomes
    both a schedule member and a vote participant, and the schedule's chat
    room is reused when one already exists. Nothing is kept if any step fails.
    """

    schedule_uuid = uuid.uuid4()
    vote_uuid = uuid.uuid4()
    with transaction(db, "create_travel_vote"):
        _insert_schedule(
            db,
            schedule_uuid=schedule_uuid,
            group_uuid=group_uuid,
            creator_uuid=creator_uuid,
            title=(title or "").strip() or location,
            location=location,
            start_date=start_date,
            end_date=end_date,
            description=description,
        )
        add_schedule_member(db, schedule_uuid, creator_uuid)
        vote = TravelVote(
            uuid=vote_uuid,
            group_uuid=group_uuid,
            creator_uuid=creator_uuid,
            title=title,
            location=location,
            start_date=start_date,
            end_date=end_date,
            headcount=headcount,
            description=description,
            vote_deadline=vote_deadline,
            schedule_uuid=schedule_uuid,
        )
        db.add(vote)
        db.flush()
        _insert_participant(db, vote_uuid, creator_uuid)
        chat_room_uuid = ensure_schedule_chat_room(db, schedule_uuid)

    logger.info("Created travel vote %s with schedule %s in group %s", vote_uuid, schedule_uuid, group_uuid)
    return TravelVoteResponse.model_validate(vote).model_copy(
        update={"chat_room_uuid": chat_room_uuid, "participant_count": 1, "has_participated": True}
    )


def validate_vote_request(db: Session, *, creator_uuid: UUID, payload: TravelVoteCreateRequest) -> None:
    """Reject incomplete or out-of-order vote requests and non-member creators."""

    location = (payload.location or "").strip()
    if not location or payload.start_date is None or payload.end_date is None or payload.vote_deadline is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=VOTE_REQUIRED_FIELDS)
    if payload.start_date > payload.end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=VOTE_DATE_ORDER)
    if not is_group_member(db, payload.group_uuid, creator_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=VOTE_MEMBERS_ONLY)


def get_vote(db: Session, vote_uuid: UUID) -> TravelVote | None:
    return db.get(TravelVote, vote_uuid)


def participant_count(db: Session, vote_uuid: UUID) -> int:
    stmt = select(func.count()).select_from(TravelVoteParticipant).where(TravelVoteParticipant.vote_uuid == vote_uuid)
    return int(db.scalar(stmt) or 0)


def has_participated(db: Session, vote_uuid: UUID, user_uuid: UUID) -> bool:
    return db.get(TravelVoteParticipant, {"vote_uuid": vote_uuid, "user_uuid": user_uuid}) is not None


def list_travel_votes(
    db: Session,
    *,
    group_uuid: UUID,
    user_uuid: UUID,
    now: datetime | None = None,
) -> list[TravelVoteResponse]:
    """Return the group's votes whose deadline has not passed, newest first."""

    if not is_group_member(db, group_uuid, user_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=VOTE_MEMBERS_ONLY)

    cutoff = now or datetime.now(timezone.utc)
    stmt = (
        select(TravelVote)
        .where(TravelVote.group_uuid == group_uuid, TravelVote.vote_deadline > cutoff)
        .order_by(TravelVote.created_at.desc())
    )
    votes: list[TravelVoteResponse] = []
    for vote in db.scalars(stmt):
        vote_uuid = cast(UUID, vote.uuid)
        room = get_schedule_chat_room(db, cast(UUID, vote.schedule_uuid)) if vote.schedule_uuid else None
        votes.append(
            TravelVoteResponse.model_validate(vote).model_copy(
                update={
                    "chat_room_uuid": room.uuid if room else None,
                    "participant_count": participant_count(db, vote_uuid),
                    "has_participated": has_participated(db, vote_uuid, user_uuid),
                }
            )
        )
    return votes


def participate_in_travel_vote(db: Session, *, vote_uuid: UUID, user_uuid: UUID, participate: bool) -> ParticipationResult:
    """Join or leave a vote together with its schedule.

    When the last participant leaves, the vote, its schedule and the
    schedule's chat room are removed in the same transaction.
    """

    vote = get_vote(db, vote_uuid)
    if vote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VOTE_NOT_FOUND)
    group_uuid = cast(UUID, vote.group_uuid)
    if not is_group_member(db, group_uuid, user_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=VOTE_MEMBERS_ONLY)

    joined = has_participated(db, vote_uuid, user_uuid)
    if participate and joined:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=VOTE_ALREADY_JOINED)
    if not participate and not joined:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=VOTE_NOT_JOINED)

    schedule_uuid = cast(UUID | None, vote.schedule_uuid)
    vote_deleted = False
    with transaction(db, "participate_in_travel_vote"):
        if participate:
            _insert_participant(db, vote_uuid, user_uuid)
            if schedule_uuid is not None:
                add_schedule_member(db, schedule_uuid, user_uuid)
        else:
            db.execute(
                delete(TravelVoteParticipant).where(
                    TravelVoteParticipant.vote_uuid == vote_uuid, TravelVoteParticipant.user_uuid == user_uuid
                )
            )
            if schedule_uuid is not None:
                remove_schedule_member(db, schedule_uuid, user_uuid)
            if participant_count(db, vote_uuid) == 0:
                db.execute(delete(TravelVote).where(TravelVote.uuid == vote_uuid))
                if schedule_uuid is not None:
                    delete_schedule_rows(db, schedule_uuid)
                vote_deleted = True

    count = 0 if vote_deleted else participant_count(db, vote_uuid)
    logger.info(
        "User %s %s vote %s (participants=%d, deleted=%s)",
        user_uuid,
        "joined" if participate else "left",
        vote_uuid,
        count,
        vote_deleted,
    )
    return ParticipationResult(vote_uuid=vote_uuid, group_uuid=group_uuid, participant_count=count, vote_deleted=vote_deleted)


__all__ = [
    "ParticipationResult",
    "create_travel_vote",
    "validate_vote_request",
    "get_vote",
    "participant_count",
    "has_participated",
    "list_travel_votes",
    "participate_in_travel_vote",
]
