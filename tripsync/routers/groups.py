"""Group API routes: creation, discovery, membership and invitations."""
from __future__ import annotations

import logging
from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..constants import GROUP_CHAT_NOT_FOUND, GROUP_INVALID_VISIBILITY, GROUP_NOT_FOUND, INVALID_REQUEST
from ..database import get_session
from ..models import Group, GroupInvite, User
from ..schemas import (
    GroupChatRoomResponse,
    GroupInfo,
    GroupInviteRequest,
    GroupInviteResponse,
    GroupJoinRequest,
    GroupMembersResponse,
    GroupSearchRequest,
    GroupSurveyPayload,
    SuccessResponse,
)
from ..services import Notifier, create_group, create_group_room_with_leader, get_current_user, get_notifier, update_group_images
from ..services.chat_service import get_group_chat_room
from ..services.group_service import (
    accept_group_invite,
    decline_group_invite,
    invite_to_group,
    is_group_member,
    join_group,
    leave_group,
    list_members,
    list_my_groups,
    recommend_groups,
    require_group,
    require_group_member,
    search_public_groups,
    to_group_info,
)
from ..services.media_service import read_image, write_image
from ..services.validation import normalize_name, validate_description

router = APIRouter(prefix="/groups", tags=["groups"])
logger = logging.getLogger(__name__)

VISIBILITIES = {"public", "private"}
MAX_GROUP_NAME_LENGTH = 50


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _parse_survey(raw: str | None) -> GroupSurveyPayload:
    if not raw:
        return GroupSurveyPayload()
    try:
        return GroupSurveyPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise _bad_request(INVALID_REQUEST) from exc


def _visible_group(db: Session, group_uuid: UUID, user_uuid: UUID) -> Group:
    group = require_group(db, group_uuid)
    if group.visibility == "private" and not is_group_member(db, group_uuid, user_uuid):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GROUP_NOT_FOUND)
    return group


def _invite_response(invite: GroupInvite) -> GroupInviteResponse:
    return GroupInviteResponse(
        uuid=invite.uuid,
        group_uuid=invite.group_uuid,
        inviter_uuid=invite.inviter_uuid,
        invited_user_uuid=invite.invited_user_uuid,
        status=invite.status,
    )


@router.post("", response_model=GroupInfo, status_code=status.HTTP_201_CREATED)
async def create_group_endpoint(
    name: str = Form(...),
    description: str | None = Form(None),
    visibility: str = Form("public"),
    survey: str | None = Form(None),
    group_icon: UploadFile | None = File(None, alias="groupIcon"),
    group_picture: UploadFile | None = File(None, alias="groupPicture"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupInfo:
    clean_name = normalize_name(name)
    if not clean_name or len(clean_name) > MAX_GROUP_NAME_LENGTH:
        raise _bad_request(f"Group names must be 1 to {MAX_GROUP_NAME_LENGTH} characters long.")
    error = validate_description(description)
    if error:
        raise _bad_request(error)
    if visibility not in VISIBILITIES:
        raise _bad_request(GROUP_INVALID_VISIBILITY)
    survey_payload = _parse_survey(survey)
    icon_data = read_image(group_icon) if group_icon else None
    picture_data = read_image(group_picture) if group_picture else None

    leader_uuid = cast(UUID, current_user.uuid)
    group = create_group(
        db,
        clean_name,
        (description or "").strip() or None,
        visibility,
        leader_uuid,
        survey=survey_payload.model_dump(),
    )
    group_uuid = cast(UUID, group.uuid)
    create_group_room_with_leader(db, group_uuid, leader_uuid)

    icon_path = (
        write_image(icon_data, group_icon.filename, folder="groups", owner_uuid=group_uuid)
        if group_icon and icon_data
        else None
    )
    picture_path = (
        write_image(picture_data, group_picture.filename, folder="groups", owner_uuid=group_uuid)
        if group_picture and picture_data
        else None
    )
    if icon_path or picture_path:
        group = update_group_images(db, group_uuid, icon_url=icon_path, picture_url=picture_path) or group

    return to_group_info(db, group)


@router.get("/my", response_model=list[GroupInfo])
async def my_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[GroupInfo]:
    return [to_group_info(db, group) for group in list_my_groups(db, cast(UUID, current_user.uuid))]


@router.get("/recommend", response_model=list[GroupInfo])
async def recommended_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[GroupInfo]:
    return [to_group_info(db, group) for group in recommend_groups(db, cast(UUID, current_user.uuid))]


@router.post("/search", response_model=list[GroupInfo])
async def search_groups(
    payload: GroupSearchRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[GroupInfo]:
    return [to_group_info(db, group) for group in search_public_groups(db, payload.name)]


@router.post("/join", response_model=SuccessResponse)
async def join_group_endpoint(
    payload: GroupJoinRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    user_uuid = cast(UUID, current_user.uuid)
    join_group(db, group_uuid=payload.group_uuid, user_uuid=user_uuid)
    await notifier.publish(payload.group_uuid, "groupMemberJoined", {"groupUuid": payload.group_uuid, "userUuid": user_uuid})
    return SuccessResponse(message="You joined the group.")


@router.post("/invites/{invite_uuid}/accept", response_model=GroupInviteResponse)
async def accept_invite_endpoint(
    invite_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> GroupInviteResponse:
    user_uuid = cast(UUID, current_user.uuid)
    invite = accept_group_invite(db, invite_uuid=invite_uuid, user_uuid=user_uuid)
    await notifier.publish(invite.group_uuid, "groupMemberJoined", {"groupUuid": invite.group_uuid, "userUuid": user_uuid})
    return _invite_response(invite)


@router.post("/invites/{invite_uuid}/decline", response_model=GroupInviteResponse)
async def decline_invite_endpoint(
    invite_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupInviteResponse:
    invite = decline_group_invite(db, invite_uuid=invite_uuid, user_uuid=cast(UUID, current_user.uuid))
    return _invite_response(invite)


@router.get("/{group_uuid}", response_model=GroupInfo)
async def read_group(
    group_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupInfo:
    return to_group_info(db, _visible_group(db, group_uuid, cast(UUID, current_user.uuid)))


@router.get("/{group_uuid}/members", response_model=GroupMembersResponse)
async def read_group_members(
    group_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupMembersResponse:
    _visible_group(db, group_uuid, cast(UUID, current_user.uuid))
    return GroupMembersResponse(members=list_members(db, group_uuid))


@router.get("/{group_uuid}/chat-room", response_model=GroupChatRoomResponse)
async def read_group_chat_room(
    group_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> GroupChatRoomResponse:
    require_group(db, group_uuid)
    require_group_member(db, group_uuid, cast(UUID, current_user.uuid))
    room = get_group_chat_room(db, group_uuid)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GROUP_CHAT_NOT_FOUND)
    return GroupChatRoomResponse(chat_room_uuid=room.uuid)


@router.post("/{group_uuid}/leave", response_model=SuccessResponse)
async def leave_group_endpoint(
    group_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    user_uuid = cast(UUID, current_user.uuid)
    leave_group(db, group_uuid=group_uuid, user_uuid=user_uuid)
    await notifier.publish(group_uuid, "groupMemberLeft", {"groupUuid": group_uuid, "userUuid": user_uuid})
    return SuccessResponse(message="You left the group.")


@router.post("/{group_uuid}/invites", response_model=GroupInviteResponse, status_code=status.HTTP_201_CREATED)
async def invite_member(
    group_uuid: UUID,
    payload: GroupInviteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> GroupInviteResponse:
    inviter_uuid = cast(UUID, current_user.uuid)
    invite = invite_to_group(
        db,
        group_uuid=group_uuid,
        inviter_uuid=inviter_uuid,
        invited_user_uuid=payload.invited_user_uuid,
    )
    group = require_group(db, group_uuid)
    await notifier.publish(
        payload.invited_user_uuid,
        "group-invite",
        {"inviteUuid": invite.uuid, "groupUuid": group_uuid, "groupName": group.name, "inviterUuid": inviter_uuid},
    )
    logger.info("Invite %s sent for group %s", invite.uuid, group_uuid)
    return _invite_response(invite)


__all__ = ["router"]
