"""Integration tests for sign-up, sign-in and the cookie session."""
from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from tripsync.config import Settings
from tripsync.constants import ACCESS_COOKIE, EMAIL_TAKEN, GENERIC_SERVER_ERROR, INVALID_CREDENTIALS
from tripsync.database import SessionLocal
from tripsync.errors import DuplicateEntryError
from tripsync.models import User, UserProfile
from tripsync.services import auth_service, hash_password, sign_up_user, user_service


def _sign_up(client, email="mina@tripsync.io", password="wander-lust-42", **extra):
    body = {"email": email, "password": password, "name": "Mina Park", "gender": "female", "birthdate": "1996-04-12"}
    body.update(extra)
    return client.post("/api/auth/sign-up", json=body)


def test_sign_up_creates_user_and_profile_and_sets_cookies(client):
    response = _sign_up(client)
    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["user"]["email"] == "mina@tripsync.io"
    assert ACCESS_COOKIE in response.cookies

    with SessionLocal() as session:
        user = session.scalar(select(User).where(User.email == "mina@tripsync.io"))
        assert user is not None
        profile = session.get(UserProfile, user.uuid)
        assert profile is not None
        assert profile.name == "Mina Park"
        assert profile.birthdate == date(1996, 4, 12)

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["uuid"] == payload["user"]["uuid"]


def test_sign_up_rejects_taken_email(client):
    assert _sign_up(client).status_code == 201
    duplicate = _sign_up(client, email="MINA@tripsync.io")
    assert duplicate.status_code == 400
    assert duplicate.json() == {"success": False, "message": EMAIL_TAKEN}


def test_sign_up_validation_errors_are_400(client):
    short = _sign_up(client, password="short")
    assert short.status_code == 400
    assert short.json()["success"] is False

    future = _sign_up(client, email="future@tripsync.io", birthdate="2999-01-01")
    assert future.status_code == 400

    overridden = _sign_up(client, email="paradox@tripsync.io", birthdate="2999-01-01", paradoxFlag=True)
    assert overridden.status_code == 201


def test_sign_up_rolls_back_user_when_profile_insert_fails(client, monkeypatch):
    def _broken_profile(*args, **kwargs):
        raise RuntimeError("profile table unavailable")

    monkeypatch.setattr(user_service, "_insert_profile", _broken_profile)

    response = _sign_up(client, email="atomic@tripsync.io")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": GENERIC_SERVER_ERROR}

    with SessionLocal() as session:
        assert session.scalar(select(User).where(User.email == "atomic@tripsync.io")) is None
        assert session.scalars(select(UserProfile)).all() == []


def test_sign_up_user_duplicate_email_leaves_single_row(db):
    sign_up_user(db, "solo@tripsync.io", hash_password("wander-lust-42"), "Solo Kim")
    with pytest.raises(DuplicateEntryError):
        sign_up_user(db, "solo@tripsync.io", hash_password("wander-lust-42"), "Solo Kim")

    users = db.scalars(select(User).where(User.email == "solo@tripsync.io")).all()
    assert len(users) == 1
    assert db.get(UserProfile, users[0].uuid) is not None



def test_sign_in_and_logout(client):
    assert _sign_up(client).status_code == 201
    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == 401

    wrong = client.post("/api/auth/sign-in", json={"email": "mina@tripsync.io", "password": "not-the-password"})
    assert wrong.status_code == 401
    assert wrong.json()["message"] == INVALID_CREDENTIALS

    signed_in = client.post("/api/auth/sign-in", json={"email": "mina@tripsync.io", "password": "wander-lust-42"})
    assert signed_in.status_code == 200
    assert client.get("/api/auth/me").status_code == 200

    refreshed = client.post("/api/auth/refresh")
    assert refreshed.status_code == 200
    assert refreshed.json()["success"] is True


def test_check_email(client):
    assert client.post("/api/auth/check-email", json={"email": "nobody@tripsync.io"}).json() == {"exists": False}
    _sign_up(client)
    assert client.post("/api/auth/check-email", json={"email": "mina@tripsync.io"}).json() == {"exists": True}
    assert client.post("/api/auth/check-email", json={"email": "not-an-email"}).status_code == 400


def test_settings_reject_placeholder_jwt_secret():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="changeme")

    assert Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="  s3cret-value  ").jwt_secret_key == "s3cret-value"
    assert Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="").jwt_secret_key is None


def test_tokens_require_a_configured_secret(monkeypatch):
    settings = Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="")
    monkeypatch.setattr(auth_service, "get_settings", lambda: settings)

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        auth_service.create_access_token(uuid4())
