"""Project-wide constant values and the fixed set of user-facing messages."""
from __future__ import annotations

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

MIN_EMAIL_LENGTH = 5
MAX_EMAIL_LENGTH = 254
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 60
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 1000
MAX_AGE_YEARS = 130

GENERIC_SERVER_ERROR = "An unexpected server error occurred."
INVALID_REQUEST = "The request is invalid."
AUTH_REQUIRED = "Authentication is required."
INVALID_TOKEN = "The session token is invalid or expired."
INVALID_CREDENTIALS = "Email or password does not match."
EMAIL_TAKEN = "This email is already registered."

FRIEND_SELF_REQUEST = "You cannot send a friend request to yourself."
FRIEND_ALREADY = "You are already friends."
FRIEND_REQUEST_PENDING = "A friend request between you is already pending."
FRIEND_ACCEPT_FAILED = "There is no pending friend request to accept."
FRIEND_DECLINE_FAILED = "There is no pending friend request to decline."
FRIEND_CANCEL_FAILED = "There is no pending friend request to cancel."
FRIEND_DELETE_FAILED = "You are not friends with this user."
USER_NOT_FOUND = "User not found."

GROUP_NOT_FOUND = "Group not found."
GROUP_ALREADY_MEMBER = "You are already a member of this group."
GROUP_NOT_MEMBER = "Only group members can do this."
GROUP_LEADER_CANNOT_LEAVE = "The group leader cannot leave the group."
GROUP_INVALID_VISIBILITY = "Choose a valid visibility."
GROUP_CHAT_NOT_FOUND = "Chat room not found."
GROUP_INVITE_NOT_FOUND = "Invitation not found."
GROUP_INVITE_PENDING = "This user already has a pending invitation."

ROOM_NOT_FOUND = "Chat room not found."
ROOM_FORBIDDEN = "You are not a member of this chat room."
DM_NOT_FRIENDS = "Direct messages are only available between friends."
DM_CLEANUP_DONE = "Direct message rooms with a single member were removed."

SCHEDULE_REQUIRED_FIELDS = "title, start_time and end_time are required."
SCHEDULE_TIMES_REQUIRED = "start_time and end_time cannot be empty."
SCHEDULE_PAST_DATE = "Group schedules must start today or later."
SCHEDULE_TIME_ORDER = "start_time cannot be later than end_time."
SCHEDULE_NOT_FOUND = "Schedule not found or you are not its owner."
SCHEDULE_PARTICIPANTS_ONLY = "Only schedule participants can access this."
SCHEDULE_DELETED = "The schedule was deleted."

VOTE_REQUIRED_FIELDS = "location, startDate, endDate and voteDeadline are required."
VOTE_DATE_ORDER = "startDate cannot be later than endDate."
VOTE_NOT_FOUND = "Vote not found."
VOTE_MEMBERS_ONLY = "Only group members can take part in votes."
VOTE_ALREADY_JOINED = "You already take part in this vote."
VOTE_NOT_JOINED = "You do not take part in this vote."
VOTE_JOINED = "You joined the vote."
VOTE_LEFT = "You left the vote."

SURVEY_SAVED = "The survey was saved."
SURVEY_NOT_FOUND = "No survey found."

