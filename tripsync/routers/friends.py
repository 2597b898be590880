"""Friend management API routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..constants import (
    FRIEND_ACCEPT_FAILED,
    FRIEND_CANCEL_FAILED,
    FRIEND_DECLINE_FAILED,
    FRIEND_DELETE_FAILED,
    FRIEND_REQUEST_PENDING,
)
from ..database import get_session
from ..errors import DuplicateEntryError
from ..models import User
from ..schemas import (
    FriendListResponse,
    FriendSearchResponse,
    FriendTargetPayload,
    ReceivedRequestsResponse,
    SuccessResponse,
)
from ..services import Notifier, accept_friend_request, get_current_user, get_notifier
from ..services.friendship_service import (
    cancel_friend_request,
    decline_friend_request,
    delete_friend,
    list_friends,
    list_received_requests,
    search_users,
    send_friend_request,
)
from ..services.user_service import require_user, to_user_card

router = APIRouter(prefix="/friends", tags=["friends"])


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


@router.get("", response_model=FriendListResponse)
async def list_my_friends(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FriendListResponse:
    friends = list_friends(db, user_uuid=cast(UUID, current_user.uuid))
    return FriendListResponse(friends=[to_user_card(friend) for friend in friends])


@router.get("/search", response_model=FriendSearchResponse)
async def search_friends(
    keyword: str = Query("", max_length=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FriendSearchResponse:
    return FriendSearchResponse(users=search_users(db, viewer_uuid=cast(UUID, current_user.uuid), keyword=keyword))


@router.get("/requests/received", response_model=ReceivedRequestsResponse)
async def received_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ReceivedRequestsResponse:
    requesters = list_received_requests(db, user_uuid=cast(UUID, current_user.uuid))
    return ReceivedRequestsResponse(requests=[to_user_card(user) for user in requesters])


@router.post("/request", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def request_friend(
    payload: FriendTargetPayload,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    requester_uuid = cast(UUID, current_user.uuid)
    try:
        send_friend_request(db, requester_uuid=requester_uuid, target_uuid=payload.target_uuid)
    except DuplicateEntryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=FRIEND_REQUEST_PENDING) from exc

    requester = to_user_card(require_user(db, requester_uuid))
    await notifier.publish(
        payload.target_uuid,
        "friendRequestReceived",
        {"requesterUuid": requester_uuid, "requester": requester.model_dump(by_alias=True)},
    )
    return SuccessResponse(message="The friend request was sent.")


@router.post("/cancel", response_model=SuccessResponse)
async def cancel_request(
    payload: FriendTargetPayload,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    requester_uuid = cast(UUID, current_user.uuid)
    if not cancel_friend_request(db, requester_uuid, payload.target_uuid):
        raise _not_found(FRIEND_CANCEL_FAILED)
    await notifier.publish(payload.target_uuid, "friendRequestCancelled", {"requesterUuid": requester_uuid})
    return SuccessResponse(message="The friend request was cancelled.")


@router.api_route("/{requester_uuid}/accept", methods=["POST", "PATCH"], response_model=SuccessResponse)
async def accept_request(
    requester_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    receiver_uuid = cast(UUID, current_user.uuid)
    if not accept_friend_request(db, receiver_uuid, requester_uuid):
        raise _not_found(FRIEND_ACCEPT_FAILED)
    await notifier.publish(requester_uuid, "friendRequestResponded", {"responderUuid": receiver_uuid, "accepted": True})
    return SuccessResponse(message="The friend request was accepted.")


@router.post("/{requester_uuid}/decline", response_model=SuccessResponse)
async def decline_request(
    requester_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    receiver_uuid = cast(UUID, current_user.uuid)
    if not decline_friend_request(db, receiver_uuid, requester_uuid):
        raise _not_found(FRIEND_DECLINE_FAILED)
    await notifier.publish(requester_uuid, "friendRequestResponded", {"responderUuid": receiver_uuid, "accepted": False})
    return SuccessResponse(message="The friend request was declined.")


@router.delete("/{friend_uuid}", response_model=SuccessResponse)
async def remove_friend(
    friend_uuid: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> SuccessResponse:
    user_uuid = cast(UUID, current_user.uuid)
    if not delete_friend(db, user_uuid, friend_uuid):
        raise _not_found(FRIEND_DELETE_FAILED)
    await notifier.publish(friend_uuid, "friendRemoved", {"userUuid": user_uuid})
    return SuccessResponse(message="The friend was removed.")


__all__ = ["router"]
