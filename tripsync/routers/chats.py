"""Chat API routes: direct-message rooms and room messages."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..constants import DM_CLEANUP_DONE, DM_NOT_FRIENDS, INVALID_REQUEST
from ..database import get_session
from ..models import User
from ..schemas import (
    ChatMessageResponse,
    CleanupResponse,
    DMRoomRequest,
    DMRoomResponse,
    MessageListResponse,
    MessageSendRequest,
)
from ..services import Notifier, are_friends, delete_lonely_dm_rooms, get_current_user, get_notifier, get_or_create_dm_room
from ..services.chat_service import DEFAULT_MESSAGE_LIMIT, list_messages, require_room_access, save_message

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post("/dm", response_model=DMRoomResponse)
async def open_dm_room(
    payload: DMRoomRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> DMRoomResponse:
    user_uuid = cast(UUID, current_user.uuid)
    if not are_friends(db, user_uuid, payload.friend_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=DM_NOT_FRIENDS)
    room_uuid = get_or_create_dm_room(db, user_uuid, payload.friend_uuid)
    return DMRoomResponse(room_uuid=room_uuid)


@router.delete("/dm/cleanup", response_model=CleanupResponse)
async def cleanup_dm_rooms(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CleanupResponse:
    deleted = delete_lonely_dm_rooms(db)
    return CleanupResponse(message=DM_CLEANUP_DONE, deleted=deleted)


@router.get("/{room_uuid}/messages", response_model=MessageListResponse)
async def read_messages(
    room_uuid: UUID,
    limit: int = Query(DEFAULT_MESSAGE_LIMIT, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageListResponse:
    require_room_access(db, room_uuid, cast(UUID, current_user.uuid))
    return MessageListResponse(messages=list_messages(db, room_uuid=room_uuid, limit=limit))


@router.post("/{room_uuid}/messages", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    room_uuid: UUID,
    payload: MessageSendRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> ChatMessageResponse:
    sender_uuid = cast(UUID, current_user.uuid)
    text = payload.message.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_REQUEST)
    require_room_access(db, room_uuid, sender_uuid)
    message = save_message(db, room_uuid=room_uuid, sender_uuid=sender_uuid, message=text)
    await notifier.publish(room_uuid, "receiveMessage", message.model_dump())
    return message


__all__ = ["router"]
