"""Convenience exports for ORM models."""
from .chat import ChatMessage, ChatRoom, ChatRoomMember, dm_key_for
from .friendship import Friendship
from .group import Group, GroupInvite, GroupMember, GroupSurvey
from .schedule import Schedule, ScheduleMember
from .survey import UserTravelSurvey
from .user import User, UserProfile
from .vote import TravelVote, TravelVoteParticipant

__all__ = [
    "ChatMessage",
    "ChatRoom",
    "ChatRoomMember",
    "dm_key_for",
    "Friendship",
    "Group",
    "GroupInvite",
    "GroupMember",
    "GroupSurvey",
    "Schedule",
    "ScheduleMember",
    "UserTravelSurvey",
    "User",
    "UserProfile",
    "TravelVote",
    "TravelVoteParticipant",
]
