"""Database layer utilities for SQLAlchemy-backed persistence."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings
from .errors import DuplicateEntryError, WorkflowError

logger = logging.getLogger(__name__)

settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine: Engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    future=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False,
)

Base = declarative_base()


def get_engine() -> Engine:
    """Return the configured SQLAlchemy engine."""
    return engine


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a SQLAlchemy session per request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_session() -> Session:
    """Return a new SQLAlchemy session for background tasks and socket handlers."""
    return SessionLocal()


@contextmanager
def transaction(db: Session, workflow: str) -> Iterator[Session]:
    """Run the enclosed statements as one unit on ``db``.

    Commits when the block exits normally. Any exception rolls the whole unit
    back; unique-constraint violations surface as :class:`DuplicateEntryError`
    and everything else as :class:`WorkflowError`, chained to the original.
    """

    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s rolled back on constraint violation: %s", workflow, exc.orig)
        raise DuplicateEntryError(workflow, str(exc.orig)) from exc
    except WorkflowError:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        logger.exception("%s rolled back", workflow)
        raise WorkflowError(workflow, str(exc)) from exc


def init_db() -> None:
    """Initialise database schema by creating tables when missing."""
    # Import models to ensure they are registered on the metadata before create_all runs.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_engine",
    "get_session",
    "create_session",
    "transaction",
    "init_db",
]
