"""Aggregate router exports."""
from .auth import router as auth_router
from .chats import router as chats_router
from .friends import router as friends_router
from .groups import router as groups_router
from .schedules import router as schedules_router
from .surveys import router as surveys_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "chats_router",
    "friends_router",
    "groups_router",
    "schedules_router",
    "surveys_router",
    "users_router",
    "votes_router",
]
