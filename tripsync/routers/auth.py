"""Authentication routes: sign-up, sign-in and cookie session management."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from ..constants import EMAIL_TAKEN, INVALID_CREDENTIALS, INVALID_TOKEN, REFRESH_COOKIE
from ..database import get_session
from ..errors import DuplicateEntryError
from ..models import User
from ..schemas import (
    AuthResponse,
    AuthUser,
    CheckEmailRequest,
    CheckEmailResponse,
    SignInRequest,
    SignUpRequest,
    SuccessResponse,
)
from ..services import authenticate_user, clear_auth_cookies, get_current_user, hash_password, set_auth_cookies, sign_up_user
from ..services.auth_service import REFRESH_TOKEN_TYPE, decode_token
from ..services.user_service import email_exists
from ..services.validation import (
    validate_birthdate,
    validate_email,
    validate_gender,
    validate_name,
    validate_password,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _validate_sign_up(payload: SignUpRequest) -> None:
    error = validate_email(payload.email) or validate_password(payload.password)
    if error is None and payload.name is not None:
        error = validate_name(payload.name)
    if error is None and payload.gender is not None:
        error = validate_gender(payload.gender)
    if error is None and payload.birthdate is not None:
        error = validate_birthdate(payload.birthdate, paradox_flag=payload.paradox_flag)
    if error:
        raise _bad_request(error)


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email_endpoint(
    payload: CheckEmailRequest,
    db: Session = Depends(get_session),
) -> CheckEmailResponse:
    error = validate_email(payload.email)
    if error:
        raise _bad_request(error)
    return CheckEmailResponse(exists=email_exists(db, payload.email))


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up_endpoint(
    payload: SignUpRequest,
    response: Response,
    db: Session = Depends(get_session),
) -> AuthResponse:
    _validate_sign_up(payload)
    if email_exists(db, payload.email):
        raise _bad_request(EMAIL_TAKEN)

    try:
        user = sign_up_user(
            db,
            payload.email,
            hash_password(payload.password.strip()),
            payload.name,
            payload.gender,
            payload.birthdate,
            payload.paradox_flag,
        )
    except DuplicateEntryError as exc:
        raise _bad_request(EMAIL_TAKEN) from exc

    set_auth_cookies(response, cast(UUID, user.uuid))
    return AuthResponse(user=AuthUser.model_validate(user))


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in_endpoint(
    payload: SignInRequest,
    response: Response,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user = authenticate_user(db, payload.email, payload.password.strip())
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    set_auth_cookies(response, cast(UUID, user.uuid))
    return AuthResponse(user=AuthUser.model_validate(user))


@router.post("/refresh", response_model=SuccessResponse)
async def refresh_endpoint(
    request: Request,
    response: Response,
    db: Session = Depends(get_session),
) -> SuccessResponse:
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN)
    user_uuid = decode_token(token, expected_type=REFRESH_TOKEN_TYPE)
    if db.get(User, user_uuid) is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN)
    set_auth_cookies(response, user_uuid)
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
async def logout_endpoint(response: Response) -> SuccessResponse:
    clear_auth_cookies(response)
    return SuccessResponse()


@router.get("/me", response_model=AuthResponse)
async def me_endpoint(current_user: User = Depends(get_current_user)) -> AuthResponse:
    return AuthResponse(user=AuthUser.model_validate(current_user))


__all__ = ["router"]
