"""Periodic maintenance for abandoned direct-message rooms."""
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from ..errors import WorkflowError
from .chat_service import delete_lonely_dm_rooms

logger = logging.getLogger(__name__)


class CleanupError(RuntimeError):
    """Raised when the cleanup task cannot complete successfully."""


def run_dm_cleanup(session_factory: Callable[[], Session]) -> int:
    """Run one lonely-DM sweep on a fresh session and return the number of rooms removed.

    Suitable for a startup hook or a background task, where each run should
    own its session.
    """

    session = session_factory()
    try:
        deleted = delete_lonely_dm_rooms(session)
    except WorkflowError as exc:
        raise CleanupError("direct message cleanup failed") from exc
    finally:
        session.close()
    logger.info("DM cleanup finished (rooms=%d)", deleted)
    return deleted


__all__ = ["CleanupError", "run_dm_cleanup"]
