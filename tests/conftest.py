"""Shared fixtures: a throwaway SQLite schema, seeded users and authenticated clients."""
from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_tripsync.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DISABLE_CLEANUP", "true")
os.environ.setdefault("MEDIA_ROOT", "./test_media")

from tripsync.database import Base, SessionLocal, engine  # noqa: E402
from tripsync.main import app  # noqa: E402
from tripsync.models import (  # noqa: E402
    ChatMessage,
    ChatRoom,
    ChatRoomMember,
    Friendship,
    Group,
    GroupInvite,
    GroupMember,
    GroupSurvey,
    Schedule,
    ScheduleMember,
    TravelVote,
    TravelVoteParticipant,
    User,
    UserProfile,
    UserTravelSurvey,
)
from tripsync.services import get_current_user, get_notifier  # noqa: E402

# Children before parents so the wipe never trips a foreign key.
_TABLES = (
    ChatMessage,
    ChatRoomMember,
    ChatRoom,
    TravelVoteParticipant,
    TravelVote,
    ScheduleMember,
    Schedule,
    GroupInvite,
    GroupSurvey,
    GroupMember,
    Group,
    Friendship,
    UserTravelSurvey,
    UserProfile,
    User,
)


@dataclass
class RecordingNotifier:
    events: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, room: UUID | str, event: str, payload: dict[str, Any]) -> None:
        self.events.append((str(room), event, payload))

    def named(self, event: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [entry for entry in self.events if entry[1] == event]


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    yield
    with SessionLocal() as session:
        for model in _TABLES:
            session.execute(delete(model))
        session.commit()


@pytest.fixture
def db() -> Iterator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _factory(name: str, email: str | None = None) -> User:
        with SessionLocal() as session:
            user = User(
                uuid=uuid.uuid4(),
                email=email or f"{name.lower().replace(' ', '.')}@tripsync.io",
                password="test-hash",
            )
            session.add(user)
            session.flush()
            session.add(UserProfile(uuid=user.uuid, name=name))
            session.commit()
            session.refresh(user)
            return user

    return _factory


@pytest.fixture
def notifier() -> Iterator[RecordingNotifier]:
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def authed_client(client: TestClient) -> Callable[[User], TestClient]:
    def _with_user(user: User) -> TestClient:
        def _override() -> User:
            return user

        app.dependency_overrides[get_current_user] = _override
        return client

    return _with_user
