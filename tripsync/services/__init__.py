"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    clear_auth_cookies,
    get_current_user,
    hash_password,
    set_auth_cookies,
    verify_password,
)
from .chat_service import (
    create_dm_room_with_members,
    create_group_room_with_leader,
    delete_lonely_dm_rooms,
    ensure_schedule_chat_room,
    get_or_create_dm_room,
)
from .cleanup_service import CleanupError, run_dm_cleanup
from .friendship_service import accept_friend_request, are_friends
from .group_service import create_group, update_group_images
from .notifier import Notifier, SocketIONotifier, get_notifier
from .survey_service import get_latest_travel_survey, save_travel_survey
from .user_service import sign_up_user
from .vote_service import ParticipationResult, create_travel_vote, participate_in_travel_vote

__all__ = [
    "authenticate_user",
    "clear_auth_cookies",
    "get_current_user",
    "hash_password",
    "set_auth_cookies",
    "verify_password",
    "create_dm_room_with_members",
    "create_group_room_with_leader",
    "delete_lonely_dm_rooms",
    "ensure_schedule_chat_room",
    "get_or_create_dm_room",
    "CleanupError",
    "run_dm_cleanup",
    "accept_friend_request",
    "are_friends",
    "create_group",
    "update_group_images",
    "Notifier",
    "SocketIONotifier",
    "get_notifier",
    "get_latest_travel_survey",
    "save_travel_survey",
    "sign_up_user",
    "ParticipationResult",
    "create_travel_vote",
    "participate_in_travel_vote",
]
