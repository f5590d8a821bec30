from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..storage import data_store

logger = logging.getLogger(__name__)


class FriendRequestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class FriendRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    sender: str
    recipient: str
    status: FriendRequestStatus = FriendRequestStatus.pending
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    responded_at: datetime | None = None


class FriendRequestCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    recipient_id: str = Field(..., min_length=1)


class FriendRequestError(Exception):
    status_code = 400


class FriendRequestNotFound(FriendRequestError):
    status_code = 404


class NotRecipient(FriendRequestError):
    status_code = 403


class InvalidTransition(FriendRequestError):
    status_code = 400


_requests: dict[str, FriendRequest] = {}
_lock = threading.Lock()


def send_friend_request(sender_id: str, recipient_id: str) -> FriendRequest:
    if sender_id == recipient_id:
        raise FriendRequestError("You cannot send a friend request to yourself")
    sender = data_store.get_profile(sender_id)
    if sender is None or data_store.get_profile(recipient_id) is None:
        raise FriendRequestNotFound("User not found")
    if recipient_id in sender.friends:
        raise FriendRequestError("You are already friends")

    pair = {sender_id, recipient_id}
    with _lock:
        if any(
            r.status is FriendRequestStatus.pending and {r.sender, r.recipient} == pair
            for r in _requests.values()
        ):
            raise FriendRequestError("A friend request between these users is already pending")
        request = FriendRequest(sender=sender_id, recipient=recipient_id)
        _requests[request.id] = request

    logger.info("Friend request %s: %s -> %s", request.id, sender_id, recipient_id)
    return request


def _respond(request_id: str, user_id: str, status: FriendRequestStatus) -> FriendRequest:
    with _lock:
        request = _requests.get(request_id)
        if request is None:
            raise FriendRequestNotFound(f"Friend request {request_id} not found")
        if request.recipient != user_id:
            raise NotRecipient("Only the recipient can respond to this friend request")
        if request.status is not FriendRequestStatus.pending:
            raise InvalidTransition(f"Friend request is already {request.status.value}")
        request = request.model_copy(update={
            "status": status,
            "responded_at": datetime.now(timezone.utc),
        })
        _requests[request_id] = request

    if status is FriendRequestStatus.accepted:
        data_store.add_friendship(request.sender, request.recipient)
    logger.info("Friend request %s %s", request_id, status.value)
    return request


def accept_friend_request(request_id: str, user_id: str) -> FriendRequest:
    return _respond(request_id, user_id, FriendRequestStatus.accepted)


def reject_friend_request(request_id: str, user_id: str) -> FriendRequest:
    return _respond(request_id, user_id, FriendRequestStatus.rejected)


def get_pending_requests(user_id: str) -> list[FriendRequest]:
    """Pending requests sent to or by ``user_id``, oldest first."""
    with _lock:
        return [
            r for r in _requests.values()
            if r.status is FriendRequestStatus.pending and user_id in (r.sender, r.recipient)
        ]


def remove_friend(user_id: str, friend_id: str) -> None:
    data_store.remove_friendship(user_id, friend_id)


def clear_requests() -> None:
    with _lock:
        _requests.clear()
