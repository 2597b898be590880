"""Convenience exports for schema layer."""
from .auth import AuthResponse, AuthUser, CheckEmailRequest, CheckEmailResponse, SignInRequest, SignUpRequest
from .chats import (
    ChatMessageResponse,
    CleanupResponse,
    DMRoomRequest,
    DMRoomResponse,
    MessageListResponse,
    MessageSendRequest,
)
from .common import SuccessResponse
from .friends import FriendListResponse, FriendSearchResponse, FriendTargetPayload, ReceivedRequestsResponse
from .groups import (
    GroupChatRoomResponse,
    GroupInfo,
    GroupInviteRequest,
    GroupInviteResponse,
    GroupJoinRequest,
    GroupMemberResponse,
    GroupMembersResponse,
    GroupSearchRequest,
    GroupSurveyPayload,
)
from .schedules import (
    ScheduleChatRoomResponse,
    ScheduleCreateRequest,
    ScheduleEnvelope,
    ScheduleListResponse,
    ScheduleResponse,
    ScheduleUpdateRequest,
)
from .surveys import TravelSurveyEnvelope, TravelSurveyRequest, TravelSurveyResponse
from .users import (
    PasswordChangeRequest,
    ProfileEnvelope,
    ProfileResponse,
    ProfileUpdateRequest,
    UserCard,
    UserCardEnvelope,
    UserCardWithStatus,
)
from .votes import (
    ParticipationRequest,
    TravelVoteCreateRequest,
    TravelVoteEnvelope,
    TravelVoteListResponse,
    TravelVoteResponse,
)

__all__ = [
    "AuthResponse",
    "AuthUser",
    "CheckEmailRequest",
    "CheckEmailResponse",
    "SignInRequest",
    "SignUpRequest",
    "ChatMessageResponse",
    "CleanupResponse",
    "DMRoomRequest",
    "DMRoomResponse",
    "MessageListResponse",
    "MessageSendRequest",
    "SuccessResponse",
    "FriendListResponse",
    "FriendSearchResponse",
    "FriendTargetPayload",
    "ReceivedRequestsResponse",
    "GroupChatRoomResponse",
    "GroupInfo",
    "GroupInviteRequest",
    "GroupInviteResponse",
    "GroupJoinRequest",
    "GroupMemberResponse",
    "GroupMembersResponse",
    "GroupSearchRequest",
    "GroupSurveyPayload",
    "ScheduleChatRoomResponse",
    "ScheduleCreateRequest",
    "ScheduleEnvelope",
    "ScheduleListResponse",
    "ScheduleResponse",
    "ScheduleUpdateRequest",
    "TravelSurveyEnvelope",
    "TravelSurveyRequest",
    "TravelSurveyResponse",
    "PasswordChangeRequest",
    "ProfileEnvelope",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "UserCard",
    "UserCardEnvelope",
    "UserCardWithStatus",
    "ParticipationRequest",
    "TravelVoteCreateRequest",
    "TravelVoteEnvelope",
    "TravelVoteListResponse",
    "TravelVoteResponse",
]
