"""Sign-up workflow and profile management."""
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import GENERIC_SERVER_ERROR, INVALID_CREDENTIALS, USER_NOT_FOUND
from ..database import transaction
from ..models import User, UserProfile
from ..schemas import ProfileResponse, ProfileUpdateRequest, UserCard
from .auth_service import hash_password, verify_password
from .media_service import format_image_url
from .validation import normalize_email, normalize_name, validate_name, validate_password

logger = logging.getLogger(__name__)


def _insert_profile(
    db: Session,
    *,
    user_uuid: UUID,
    name: str | None,
    gender: str | None,
    birthdate: date | None,
    paradox_flag: bool,
) -> UserProfile:
    profile = UserProfile(
        uuid=user_uuid,
        name=name,
        gender=gender,
        birthdate=birthdate,
        paradox_flag=bool(paradox_flag),
        profile_picture=None,
    )
    db.add(profile)
    db.flush()
    return profile


def sign_up_user(
    db: Session,
    email: str,
    hashed_password: str,
    name: str | None = None,
    gender: str | None = None,
    birthdate: date | None = None,
    paradox_flag: bool = False,
) -> User:
    """Create a user and its profile row as a single unit.

    The user uuid is generated before the insert so the profile can reference it
    without re-reading the user row. A duplicate email raises
    :class:`~tripsync.errors.DuplicateEntryError` and leaves nothing behind.
    """

    user_uuid = uuid.uuid4()
    with transaction(db, "sign_up_user"):
        user = User(uuid=user_uuid, email=normalize_email(email), password=hashed_password)
        db.add(user)
        db.flush()
        _insert_profile(
            db,
            user_uuid=user_uuid,
            name=normalize_name(name) or None,
            gender=gender,
            birthdate=birthdate,
            paradox_flag=paradox_flag,
        )
    logger.info("Signed up user %s", user_uuid)
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def email_exists(db: Session, email: str) -> bool:
    return get_user_by_email(db, email) is not None


def get_profile(db: Session, user_uuid: UUID) -> UserProfile | None:
    return db.get(UserProfile, user_uuid)


def to_profile_response(user: User) -> ProfileResponse:
    profile = user.profile
    return ProfileResponse(
        uuid=cast(UUID, user.uuid),
        email=cast(str, user.email),
        name=profile.name if profile else None,
        gender=profile.gender if profile else None,
        birthdate=profile.birthdate if profile else None,
        paradox_flag=bool(profile.paradox_flag) if profile else False,
        profile_picture=format_image_url(profile.profile_picture) if profile else None,
    )


def to_user_card(user: User) -> UserCard:
    profile = user.profile
    return UserCard(
        uuid=cast(UUID, user.uuid),
        email=cast(str, user.email),
        name=profile.name if profile else None,
        profile_picture=format_image_url(profile.profile_picture) if profile else None,
    )


def require_user(db: Session, user_uuid: UUID) -> User:
    user = db.get(User, user_uuid)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return user


def _require_profile(db: Session, user_uuid: UUID) -> UserProfile:
    profile = get_profile(db, user_uuid)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return profile


def update_profile(db: Session, *, user_uuid: UUID, payload: ProfileUpdateRequest) -> UserProfile:
    """Write only the profile fields present in ``payload``."""

    profile = _require_profile(db, user_uuid)
    updates = payload.model_dump(exclude_unset=True)

    if "name" in updates:
        name = updates["name"]
        if name is not None:
            error = validate_name(name)
            if error:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
            name = normalize_name(name)
        setattr(profile, "name", name)
    if "profile_picture" in updates:
        setattr(profile, "profile_picture", updates["profile_picture"])

    if not updates:
        return profile

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_SERVER_ERROR) from exc
    db.refresh(profile)
    return profile


def update_profile_picture(db: Session, *, user_uuid: UUID, picture_path: str) -> UserProfile:
    return update_profile(db, user_uuid=user_uuid, payload=ProfileUpdateRequest(profile_picture=picture_path))


def change_password(db: Session, *, user_uuid: UUID, current_password: str, new_password: str) -> None:
    user = require_user(db, user_uuid)
    if not verify_password(current_password, cast(str, user.password)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)
    error = validate_password(new_password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    setattr(user, "password", hash_password(new_password))
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_SERVER_ERROR) from exc
    logger.info("Password changed for user %s", user.uuid)


__all__ = [
    "sign_up_user",
    "get_user_by_email",
    "email_exists",
    "get_profile",
    "require_user",
    "to_profile_response",
    "to_user_card",
    "update_profile",
    "update_profile_picture",
    "change_password",
]
