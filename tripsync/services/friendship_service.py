"""Business logic for friend requests and friendships.

A friendship is one canonical row per unordered pair: ``user1_uuid`` holds the
lower uuid, ``requester_uuid`` remembers who asked, and ``status`` moves from
``pending`` to ``accepted``. Declining, cancelling and unfriending delete the row.
"""
from __future__ import annotations

import logging
from typing import cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, selectinload

from ..constants import (
    FRIEND_ALREADY,
    FRIEND_REQUEST_PENDING,
    FRIEND_SELF_REQUEST,
    USER_NOT_FOUND,
)
from ..database import transaction
from ..models import Friendship, User, UserProfile
from ..schemas import UserCardWithStatus
from .chat_service import find_dm_room, remove_room_member
from .user_service import to_user_card

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 20


def _ordered_pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    return (a, b) if str(a) < str(b) else (b, a)


def _pair_clause(a: UUID, b: UUID):
    first, second = _ordered_pair(a, b)
    return and_(Friendship.user1_uuid == first, Friendship.user2_uuid == second)


def _involving(user_uuid: UUID):
    return or_(Friendship.user1_uuid == user_uuid, Friendship.user2_uuid == user_uuid)


def get_friendship(db: Session, a: UUID, b: UUID) -> Friendship | None:
    return db.scalar(select(Friendship).where(_pair_clause(a, b)))


def are_friends(db: Session, a: UUID, b: UUID) -> bool:
    friendship = get_friendship(db, a, b)
    return friendship is not None and friendship.status == "accepted"


def friend_uuids(db: Session, user_uuid: UUID) -> list[UUID]:
    stmt = select(Friendship).where(_involving(user_uuid), Friendship.status == "accepted")
    return [cast(UUID, row.other(user_uuid)) for row in db.scalars(stmt)]


def _users_with_profiles(db: Session, uuids: list[UUID]) -> list[User]:
    if not uuids:
        return []
    stmt = select(User).options(selectinload(User.profile)).where(User.uuid.in_(uuids))
    users = {cast(UUID, user.uuid): user for user in db.scalars(stmt)}
    return [users[item] for item in uuids if item in users]


def list_friends(db: Session, *, user_uuid: UUID) -> list[User]:
    return _users_with_profiles(db, friend_uuids(db, user_uuid))


def list_received_requests(db: Session, *, user_uuid: UUID) -> list[User]:
    stmt = (
        select(Friendship)
        .where(_involving(user_uuid), Friendship.status == "pending", Friendship.requester_uuid != user_uuid)
        .order_by(Friendship.created_at.desc())
    )
    return _users_with_profiles(db, [cast(UUID, row.requester_uuid) for row in db.scalars(stmt)])


def with_friend_status(db: Session, *, viewer_uuid: UUID, user: User) -> UserCardWithStatus:
    """Return ``user`` as a card annotated with its relation to ``viewer_uuid``."""

    card = to_user_card(user)
    friendship = get_friendship(db, viewer_uuid, cast(UUID, user.uuid))
    return UserCardWithStatus(
        **card.model_dump(),
        friend_status=friendship.status if friendship else None,
        friend_requester=friendship.requester_uuid if friendship else None,
    )


def search_users(db: Session, *, viewer_uuid: UUID, keyword: str) -> list[UserCardWithStatus]:
    candidate = keyword.strip()
    if not candidate:
        return []
    pattern = f"%{candidate}%"
    stmt = (
        select(User)
        .outerjoin(UserProfile, UserProfile.uuid == User.uuid)
        .options(selectinload(User.profile))
        .where(User.uuid != viewer_uuid, or_(User.email.ilike(pattern), UserProfile.name.ilike(pattern)))
        .order_by(User.email.asc())
        .limit(MAX_SEARCH_RESULTS)
    )
    return [with_friend_status(db, viewer_uuid=viewer_uuid, user=user) for user in db.scalars(stmt)]


def send_friend_request(db: Session, *, requester_uuid: UUID, target_uuid: UUID) -> Friendship:
    if requester_uuid == target_uuid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=FRIEND_SELF_REQUEST)
    if db.get(User, target_uuid) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)

    existing = get_friendship(db, requester_uuid, target_uuid)
    if existing is not None:
        detail = FRIEND_ALREADY if existing.status == "accepted" else FRIEND_REQUEST_PENDING
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    first, second = _ordered_pair(requester_uuid, target_uuid)
    friendship = Friendship(user1_uuid=first, user2_uuid=second, requester_uuid=requester_uuid, status="pending")
    with transaction(db, "send_friend_request"):
        db.add(friendship)
    logger.info("Friend request %s -> %s", requester_uuid, target_uuid)
    return friendship


def _pending_from(db: Session, *, requester_uuid: UUID, receiver_uuid: UUID) -> Friendship | None:
    stmt = select(Friendship).where(
        _pair_clause(requester_uuid, receiver_uuid),
        Friendship.requester_uuid == requester_uuid,
        Friendship.status == "pending",
    )
    return db.scalar(stmt)


def accept_friend_request(db: Session, receiver_uuid: UUID, requester_uuid: UUID) -> bool:
    """Turn the pending request from ``requester_uuid`` into an accepted friendship.

    Returns ``False`` without touching any row when no such request is pending,
    which also covers a second accept of the same request and an accept issued
    by the requester themselves.
    """

    if receiver_uuid == requester_uuid:
        return False
    pending = _pending_from(db, requester_uuid=requester_uuid, receiver_uuid=receiver_uuid)
    if pending is None:
        db.rollback()
        logger.info("No pending request from %s to %s", requester_uuid, receiver_uuid)
        return False
    with transaction(db, "accept_friend_request"):
        setattr(pending, "status", "accepted")
    logger.info("Friend request %s -> %s accepted", requester_uuid, receiver_uuid)
    return True


def _delete_where(db: Session, workflow: str, friendship: Friendship | None) -> bool:
    if friendship is None:
        return False
    with transaction(db, workflow):
        db.delete(friendship)
    return True


def decline_friend_request(db: Session, receiver_uuid: UUID, requester_uuid: UUID) -> bool:
    pending = _pending_from(db, requester_uuid=requester_uuid, receiver_uuid=receiver_uuid)
    return _delete_where(db, "decline_friend_request", pending)


def cancel_friend_request(db: Session, requester_uuid: UUID, target_uuid: UUID) -> bool:
    pending = _pending_from(db, requester_uuid=requester_uuid, receiver_uuid=target_uuid)
    return _delete_where(db, "cancel_friend_request", pending)


def delete_friend(db: Session, user_uuid: UUID, friend_uuid: UUID) -> bool:
    """End an accepted friendship and leave the shared DM room.

    The room itself stays until the lonely-DM sweep removes it.
    """

    friendship = get_friendship(db, user_uuid, friend_uuid)
    if friendship is None or friendship.status != "accepted":
        return False
    room = find_dm_room(db, user_uuid, friend_uuid)
    with transaction(db, "delete_friend"):
        db.delete(friendship)
        if room is not None:
            remove_room_member(db, cast(UUID, room.uuid), user_uuid)
    logger.info("User %s removed friend %s", user_uuid, friend_uuid)
    return True


__all__ = [
    "get_friendship",
    "are_friends",
    "friend_uuids",
    "list_friends",
    "list_received_requests",
    "with_friend_status",
    "search_users",
    "send_friend_request",
    "accept_friend_request",
    "decline_friend_request",
    "cancel_friend_request",
    "delete_friend",
]
