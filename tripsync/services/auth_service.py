"""Business logic for authentication: password hashing, JWT cookies and the current user."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import ACCESS_COOKIE, AUTH_REQUIRED, INVALID_TOKEN, REFRESH_COOKIE
from ..database import get_session
from ..models import User

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _get_jwt_secret() -> str:
    secret = get_settings().jwt_secret_key
    if secret is None:
        raise RuntimeError("Environment variable JWT_SECRET_KEY is required to sign tokens")
    return secret


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def _encode(subject: UUID, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "typ": token_type, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=get_settings().jwt_algorithm)


def create_access_token(subject: UUID) -> str:
    return _encode(subject, ACCESS_TOKEN_TYPE, timedelta(minutes=get_settings().access_token_minutes))


def create_refresh_token(subject: UUID) -> str:
    return _encode(subject, REFRESH_TOKEN_TYPE, timedelta(days=get_settings().refresh_token_days))


def decode_token(token: str, *, expected_type: str = ACCESS_TOKEN_TYPE) -> UUID:
    """Decode and validate a JWT, returning the embedded subject UUID."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN) from exc

    if payload.get("typ") != expected_type:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN)
    subject = payload.get("sub")
    try:
        return UUID(subject)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN) from exc


def set_auth_cookies(response: Response, user_uuid: UUID) -> None:
    """Issue a fresh access/refresh cookie pair for ``user_uuid``."""

    settings = get_settings()
    response.set_cookie(
        ACCESS_COOKIE,
        create_access_token(user_uuid),
        max_age=settings.access_token_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_COOKIE,
        create_refresh_token(user_uuid),
        max_age=settings.refresh_token_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user against stored credentials."""

    user = db.scalar(select(User).where(User.email == email.strip().lower()))
    if user is None:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def user_from_token(db: Session, token: str | None) -> User | None:
    """Resolve a user from a raw access token, returning ``None`` when invalid."""

    if not token:
        return None
    try:
        user_uuid = decode_token(token)
    except HTTPException:
        return None
    return db.get(User, user_uuid)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the authenticated user from the access cookie or a bearer token."""

    token = request.cookies.get(ACCESS_COOKIE)
    if not token and credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AUTH_REQUIRED)

    user_uuid = decode_token(token)
    user = db.get(User, user_uuid)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN)
    return user


__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "set_auth_cookies",
    "clear_auth_cookies",
    "authenticate_user",
    "user_from_token",
    "get_current_user",
    "REFRESH_TOKEN_TYPE",
]
