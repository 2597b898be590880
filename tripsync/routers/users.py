"""Profile routes for the signed-in user and other users."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import PasswordChangeRequest, ProfileEnvelope, ProfileUpdateRequest, SuccessResponse, UserCardEnvelope
from ..services import get_current_user
from ..services.friendship_service import with_friend_status
from ..services.media_service import store_image
from ..services.user_service import (
    change_password,
    require_user,
    to_profile_response,
    update_profile,
    update_profile_picture,
)

router = APIRouter(prefix="/users", tags=["users"])


def _profile_envelope(db: Session, user_uuid: UUID) -> ProfileEnvelope:
    return ProfileEnvelope(profile=to_profile_response(require_user(db, user_uuid)))


@router.get("/me", response_model=ProfileEnvelope)
async def read_my_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ProfileEnvelope:
    return _profile_envelope(db, cast(UUID, current_user.uuid))


@router.patch("/me", response_model=ProfileEnvelope)
async def update_my_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ProfileEnvelope:
    user_uuid = cast(UUID, current_user.uuid)
    update_profile(db, user_uuid=user_uuid, payload=payload)
    return _profile_envelope(db, user_uuid)


@router.post("/me/profile-picture", response_model=ProfileEnvelope)
async def upload_profile_picture(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ProfileEnvelope:
    user_uuid = cast(UUID, current_user.uuid)
    path = store_image(file, folder="profiles", owner_uuid=user_uuid)
    update_profile_picture(db, user_uuid=user_uuid, picture_path=path)
    return _profile_envelope(db, user_uuid)


@router.patch("/me/password", response_model=SuccessResponse)
async def change_my_password(
    payload: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuccessResponse:
    change_password(
        db,
        user_uuid=cast(UUID, current_user.uuid),
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return SuccessResponse(message="The password was changed.")


@router.get("/{user_uuid}", response_model=UserCardEnvelope)
async def read_user_profile(
    user_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserCardEnvelope:
    user = require_user(db, user_uuid)
    return UserCardEnvelope(profile=with_friend_status(db, viewer_uuid=cast(UUID, current_user.uuid), user=user))


__all__ = ["router"]
