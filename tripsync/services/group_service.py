"""Group creation, membership and invitations."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import case, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import (
    GENERIC_SERVER_ERROR,
    GROUP_ALREADY_MEMBER,
    GROUP_INVITE_NOT_FOUND,
    GROUP_INVITE_PENDING,
    GROUP_LEADER_CANNOT_LEAVE,
    GROUP_NOT_FOUND,
    GROUP_NOT_MEMBER,
    USER_NOT_FOUND,
)
from ..database import transaction
from ..errors import WorkflowError
from ..models import Group, GroupInvite, GroupMember, GroupSurvey, User, UserProfile
from ..schemas import GroupInfo, GroupMemberResponse
from .chat_service import add_room_member, get_group_chat_room, remove_room_member
from .media_service import format_image_url
from .survey_service import get_latest_travel_survey

logger = logging.getLogger(__name__)

SURVEY_FIELDS = ("activity_type", "budget_type", "trip_duration")
MAX_SEARCH_RESULTS = 50
MAX_RECOMMENDATIONS = 5


def _survey_value(survey: Mapping[str, Any], field: str) -> int:
    value = survey.get(field)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _insert_leader(db: Session, group_uuid: UUID, leader_uuid: UUID) -> None:
    db.add(GroupMember(group_uuid=group_uuid, user_uuid=leader_uuid, role="leader"))
    db.flush()


def _insert_group_survey(db: Session, group_uuid: UUID, survey: Mapping[str, Any]) -> None:
    db.add(GroupSurvey(group_uuid=group_uuid, **{field: _survey_value(survey, field) for field in SURVEY_FIELDS}))
    db.flush()


def create_group(
    db: Session,
    name: str,
    description: str | None,
    visibility: str,
    leader_uuid: UUID,
    icon_url: str | None = None,
    picture_url: str | None = None,
    survey: Mapping[str, Any] | None = None,
) -> Group:
    """Create a group together with its leader membership and survey answers.

    Missing survey fields are stored as ``0``. Either all three rows are
    committed or none are.
    """

    group_uuid = uuid.uuid4()
    with transaction(db, "create_group"):
        db.add(
            Group(
                uuid=group_uuid,
                name=name,
                description=description,
                visibility=visibility,
                group_leader_uuid=leader_uuid,
                group_icon=icon_url,
                group_picture=picture_url,
            )
        )
        db.flush()
        _insert_leader(db, group_uuid, leader_uuid)
        if db.get(Group, group_uuid) is None:
            raise WorkflowError("create_group", f"group {group_uuid} not visible after insert")
        _insert_group_survey(db, group_uuid, survey or {})

    group = db.get(Group, group_uuid)
    if group is None:
        raise WorkflowError("create_group", f"group {group_uuid} missing after commit")
    logger.info("Created group %s led by %s", group_uuid, leader_uuid)
    return group


def update_group_images(
    db: Session,
    group_uuid: UUID,
    *,
    icon_url: str | None = None,
    picture_url: str | None = None,
) -> Group | None:
    """Attach uploaded image paths to an existing group, leaving absent ones untouched."""

    group = db.get(Group, group_uuid)
    if group is None:
        return None
    if icon_url is not None:
        setattr(group, "group_icon", icon_url)
    if picture_url is not None:
        setattr(group, "group_picture", picture_url)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_SERVER_ERROR) from exc
    db.refresh(group)
    return group


def get_group(db: Session, group_uuid: UUID) -> Group | None:
    return db.get(Group, group_uuid)


def require_group(db: Session, group_uuid: UUID) -> Group:
    group = get_group(db, group_uuid)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GROUP_NOT_FOUND)
    return group


def get_membership(db: Session, group_uuid: UUID, user_uuid: UUID) -> GroupMember | None:
    return db.get(GroupMember, {"group_uuid": group_uuid, "user_uuid": user_uuid})


def is_group_member(db: Session, group_uuid: UUID, user_uuid: UUID) -> bool:
    return get_membership(db, group_uuid, user_uuid) is not None


def require_group_member(db: Session, group_uuid: UUID, user_uuid: UUID) -> None:
    if not is_group_member(db, group_uuid, user_uuid):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=GROUP_NOT_MEMBER)


def to_group_info(db: Session, group: Group) -> GroupInfo:
    room = get_group_chat_room(db, cast(UUID, group.uuid))
    info = GroupInfo.model_validate(group)
    return info.model_copy(
        update={
            "group_icon": format_image_url(info.group_icon),
            "group_picture": format_image_url(info.group_picture),
            "chat_room_uuid": room.uuid if room else None,
        }
    )


def list_my_groups(db: Session, user_uuid: UUID) -> list[Group]:
    stmt = (
        select(Group)
        .join(GroupMember, GroupMember.group_uuid == Group.uuid)
        .where(GroupMember.user_uuid == user_uuid)
        .order_by(Group.created_at.desc())
    )
    return list(db.scalars(stmt))


def search_public_groups(db: Session, name: str) -> list[Group]:
    stmt = select(Group).where(Group.visibility == "public")
    candidate = name.strip()
    if candidate:
        stmt = stmt.where(Group.name.ilike(f"%{candidate}%"))
    return list(db.scalars(stmt.order_by(Group.created_at.desc()).limit(MAX_SEARCH_RESULTS)))


def recommend_groups(db: Session, user_uuid: UUID) -> list[Group]:
    """Rank public groups the user has not joined against their latest travel survey.

    Each matching survey answer scores one point; ties go to the newest group.
    Without a survey the newest public groups are returned instead.
    """

    joined = select(GroupMember.group_uuid).where(GroupMember.user_uuid == user_uuid)
    stmt = select(Group).where(Group.visibility == "public", Group.uuid.not_in(joined))

    survey = get_latest_travel_survey(db, user_uuid=user_uuid)
    if survey is None:
        logger.debug("No travel survey for %s; recommending newest groups", user_uuid)
        return list(db.scalars(stmt.order_by(Group.created_at.desc()).limit(MAX_RECOMMENDATIONS)))

    score = (
        case((GroupSurvey.activity_type == survey.activity_type, 1), else_=0)
        + case((GroupSurvey.budget_type == survey.budget_type, 1), else_=0)
        + case((GroupSurvey.trip_duration == survey.trip_duration, 1), else_=0)
    )
    stmt = (
        stmt.outerjoin(GroupSurvey, GroupSurvey.group_uuid == Group.uuid)
        .order_by(score.desc(), Group.created_at.desc())
        .limit(MAX_RECOMMENDATIONS)
    )
    return list(db.scalars(stmt))


def list_members(db: Session, group_uuid: UUID) -> list[GroupMemberResponse]:
    stmt = (
        select(GroupMember.user_uuid, GroupMember.role, UserProfile.name, UserProfile.profile_picture)
        .outerjoin(UserProfile, UserProfile.uuid == GroupMember.user_uuid)
        .where(GroupMember.group_uuid == group_uuid)
        .order_by(GroupMember.role.asc(), GroupMember.created_at.asc())
    )
    return [
        GroupMemberResponse(uuid=user_uuid, role=role, name=name, profile_picture=format_image_url(picture))
        for user_uuid, role, name, picture in db.execute(stmt)
    ]


def _add_member(db: Session, group_uuid: UUID, user_uuid: UUID) -> None:
    db.add(GroupMember(group_uuid=group_uuid, user_uuid=user_uuid, role="member"))
    db.flush()
    room = get_group_chat_room(db, group_uuid)
    if room is not None:
        add_room_member(db, cast(UUID, room.uuid), user_uuid)


def join_group(db: Session, *, group_uuid: UUID, user_uuid: UUID) -> Group:
    """Add ``user_uuid`` to a public group and its chat room in one transaction."""

    group = require_group(db, group_uuid)
    if group.visibility != "public":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GROUP_NOT_FOUND)
    if is_group_member(db, group_uuid, user_uuid):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GROUP_ALREADY_MEMBER)

    with transaction(db, "join_group"):
        _add_member(db, group_uuid, user_uuid)
    logger.info("User %s joined group %s", user_uuid, group_uuid)
    return group


def leave_group(db: Session, *, group_uuid: UUID, user_uuid: UUID) -> None:
    group = require_group(db, group_uuid)
    if group.group_leader_uuid == user_uuid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GROUP_LEADER_CANNOT_LEAVE)
    membership = get_membership(db, group_uuid, user_uuid)
    if membership is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GROUP_NOT_MEMBER)

    room = get_group_chat_room(db, group_uuid)
    with transaction(db, "leave_group"):
        db.delete(membership)
        if room is not None:
            remove_room_member(db, cast(UUID, room.uuid), user_uuid)
    logger.info("User %s left group %s", user_uuid, group_uuid)


def invite_to_group(db: Session, *, group_uuid: UUID, inviter_uuid: UUID, invited_user_uuid: UUID) -> GroupInvite:
    require_group(db, group_uuid)
    require_group_member(db, group_uuid, inviter_uuid)
    if db.get(User, invited_user_uuid) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    if is_group_member(db, group_uuid, invited_user_uuid):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GROUP_ALREADY_MEMBER)

    invite = db.scalar(
        select(GroupInvite).where(GroupInvite.group_uuid == group_uuid, GroupInvite.invited_user_uuid == invited_user_uuid)
    )
    if invite is not None and invite.status == "pending":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GROUP_INVITE_PENDING)

    with transaction(db, "invite_to_group"):
        if invite is None:
            invite = GroupInvite(
                uuid=uuid.uuid4(),
                group_uuid=group_uuid,
                inviter_uuid=inviter_uuid,
                invited_user_uuid=invited_user_uuid,
                status="pending",
            )
            db.add(invite)
        else:
            # Earlier answered invitations are reopened in place.
            setattr(invite, "inviter_uuid", inviter_uuid)
            setattr(invite, "status", "pending")
    logger.info("User %s invited %s to group %s", inviter_uuid, invited_user_uuid, group_uuid)
    return invite


def _pending_invite_for(db: Session, invite_uuid: UUID, user_uuid: UUID) -> GroupInvite:
    invite = db.get(GroupInvite, invite_uuid)
    if invite is None or invite.invited_user_uuid != user_uuid or invite.status != "pending":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GROUP_INVITE_NOT_FOUND)
    return invite


def accept_group_invite(db: Session, *, invite_uuid: UUID, user_uuid: UUID) -> GroupInvite:
    invite = _pending_invite_for(db, invite_uuid, user_uuid)
    group_uuid = cast(UUID, invite.group_uuid)
    already_member = is_group_member(db, group_uuid, user_uuid)
    with transaction(db, "accept_group_invite"):
        setattr(invite, "status", "accepted")
        if not already_member:
            _add_member(db, group_uuid, user_uuid)
    logger.info("User %s accepted invite %s", user_uuid, invite_uuid)
    return invite


def decline_group_invite(db: Session, *, invite_uuid: UUID, user_uuid: UUID) -> GroupInvite:
    invite = _pending_invite_for(db, invite_uuid, user_uuid)
    with transaction(db, "decline_group_invite"):
        setattr(invite, "status", "declined")
    return invite


__all__ = [
    "create_group",
    "update_group_images",
    "get_group",
    "require_group",
    "get_membership",
    "is_group_member",
    "require_group_member",
    "to_group_info",
    "list_my_groups",
    "search_public_groups",
    "recommend_groups",
    "list_members",
    "join_group",
    "leave_group",
    "invite_to_group",
    "accept_group_invite",
    "decline_group_invite",
]
