"""Schedule API routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..constants import SCHEDULE_DELETED
from ..database import get_session
from ..models import User
from ..schemas import (
    ScheduleChatRoomResponse,
    ScheduleCreateRequest,
    ScheduleEnvelope,
    ScheduleListResponse,
    ScheduleResponse,
    ScheduleUpdateRequest,
    SuccessResponse,
)
from ..services import Notifier, get_current_user, get_notifier
from ..services.schedule_service import (
    create_schedule,
    delete_schedule,
    get_schedule_chat_room,
    list_schedules,
    update_schedule,
)

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", response_model=ScheduleListResponse)
async def read_schedules(
    group_uuid: UUID | None = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ScheduleListResponse:
    schedules = list_schedules(db, user_uuid=cast(UUID, current_user.uuid), group_uuid=group_uuid)
    return ScheduleListResponse(schedules=[ScheduleResponse.model_validate(item) for item in schedules])


@router.post("", response_model=ScheduleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_schedule_endpoint(
    payload: ScheduleCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> ScheduleEnvelope:
    schedule = create_schedule(db, owner_uuid=cast(UUID, current_user.uuid), payload=payload)
    if schedule.group_uuid is not None:
        await notifier.publish(
            schedule.group_uuid,
            "scheduleCreated",
            {"scheduleUuid": schedule.uuid, "groupUuid": schedule.group_uuid, "title": schedule.title},
        )
    return ScheduleEnvelope(schedule=ScheduleResponse.model_validate(schedule))


@router.patch("/{schedule_uuid}", response_model=ScheduleEnvelope)
async def update_schedule_endpoint(
    schedule_uuid: UUID,
    payload: ScheduleUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ScheduleEnvelope:
    schedule = update_schedule(db, user_uuid=cast(UUID, current_user.uuid), schedule_uuid=schedule_uuid, payload=payload)
    return ScheduleEnvelope(schedule=ScheduleResponse.model_validate(schedule))


@router.delete("/{schedule_uuid}", response_model=SuccessResponse)
async def delete_schedule_endpoint(
    schedule_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuccessResponse:
    delete_schedule(db, user_uuid=cast(UUID, current_user.uuid), schedule_uuid=schedule_uuid)
    return SuccessResponse(message=SCHEDULE_DELETED)


@router.get("/{schedule_uuid}/chat-room", response_model=ScheduleChatRoomResponse)
async def read_schedule_chat_room(
    schedule_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ScheduleChatRoomResponse:
    room_uuid, title = get_schedule_chat_room(db, user_uuid=cast(UUID, current_user.uuid), schedule_uuid=schedule_uuid)
    return ScheduleChatRoomResponse(chat_room_uuid=room_uuid, title=title)


__all__ = ["router"]
