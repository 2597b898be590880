"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

import socketio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import configure_logging, get_settings
from .constants import GENERIC_SERVER_ERROR, INVALID_REQUEST
from .database import create_session, init_db
from .errors import DuplicateEntryError, WorkflowError
from .routers import (
    auth_router,
    chats_router,
    friends_router,
    groups_router,
    schedules_router,
    surveys_router,
    users_router,
    votes_router,
)
from .services import CleanupError, run_dm_cleanup
from .services import realtime  # noqa: F401  registers the socket event handlers
from .services.media_service import media_root
from .services.notifier import socket_server

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for _router in (
    auth_router,
    users_router,
    friends_router,
    groups_router,
    chats_router,
    schedules_router,
    votes_router,
    surveys_router,
):
    app.include_router(_router, prefix="/api")


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _failure(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return _failure(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)


@app.exception_handler(DuplicateEntryError)
async def _duplicate_error(request: Request, exc: DuplicateEntryError) -> JSONResponse:
    return _failure(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)


@app.exception_handler(WorkflowError)
async def _workflow_error(request: Request, exc: WorkflowError) -> JSONResponse:
    logger.error("Workflow %s failed on %s: %s", exc.workflow, request.url.path, exc.message)
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR)


_CLEANUP_INTERVAL = timedelta(minutes=settings.dm_cleanup_interval_minutes)
_cleanup_task: asyncio.Task[None] | None = None
_cleanup_stop = asyncio.Event()


async def _run_cleanup_once() -> None:
    """Execute a single lonely-DM sweep in a worker thread."""

    try:
        deleted = await asyncio.to_thread(run_dm_cleanup, create_session)
        logger.info("Cleanup summary (dm_rooms=%d)", deleted)
    except CleanupError:
        logger.exception("Scheduled cleanup failed")


async def _cleanup_loop() -> None:
    """Background task that runs cleanup on a fixed interval."""

    while not _cleanup_stop.is_set():
        await _run_cleanup_once()
        try:
            await asyncio.wait_for(_cleanup_stop.wait(), timeout=_CLEANUP_INTERVAL.total_seconds())
        except asyncio.TimeoutError:
            continue


@app.on_event("startup")
async def _startup() -> None:
    """Ensure database schema and background tasks are ready before serving."""

    try:
        init_db()
    except Exception:
        logger.exception("Database initialisation failed")
        raise

    if settings.disable_cleanup:
        logger.info("Background cleanup disabled")
        return

    global _cleanup_task
    if _cleanup_task is None or _cleanup_task.done():
        _cleanup_stop.clear()
        _cleanup_task = asyncio.create_task(_cleanup_loop())


@app.on_event("shutdown")
async def _shutdown() -> None:
    """Stop background tasks cleanly during application shutdown."""

    _cleanup_stop.set()
    if _cleanup_task is not None:
        await _cleanup_task


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


_media_dir = media_root()
_media_dir.mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=str(_media_dir), check_dir=False), name="media")

# Socket.IO traffic is served on /socket.io; everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(socket_server, other_asgi_app=app)
