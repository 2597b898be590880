"""Pydantic schemas for authentication endpoints."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CheckEmailRequest(BaseModel):
    email: str


class CheckEmailResponse(BaseModel):
    exists: bool


class SignUpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    name: str | None = None
    gender: str | None = None
    birthdate: date | None = None
    paradox_flag: bool = Field(default=False, alias="paradoxFlag")


class SignInRequest(BaseModel):
    email: str
    password: str


class AuthUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    email: str


class AuthResponse(BaseModel):
    success: bool = True
    user: AuthUser


__all__ = [
    "CheckEmailRequest",
    "CheckEmailResponse",
    "SignUpRequest",
    "SignInRequest",
    "AuthUser",
    "AuthResponse",
]
