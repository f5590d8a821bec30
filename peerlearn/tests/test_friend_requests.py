from __future__ import annotations

import threading

import pytest

from peerlearn.social import friend_requests
from peerlearn.social.friend_requests import (
    FriendRequestError,
    FriendRequestNotFound,
    FriendRequestStatus,
    InvalidTransition,
    NotRecipient,
    accept_friend_request,
    clear_requests,
    get_pending_requests,
    reject_friend_request,
    remove_friend,
    send_friend_request,
)
from peerlearn.storage import data_store


@pytest.fixture(autouse=True)
def _fresh_state():
    data_store.reset_store()
    clear_requests()
    yield
    data_store.reset_store()
    clear_requests()


def test_new_request_is_pending():
    request = send_friend_request("u-alice", "u-dan")
    assert request.status is FriendRequestStatus.pending
    assert get_pending_requests("u-dan") == [request]
    assert get_pending_requests("u-alice") == [request]


def test_accept_links_both_profiles():
    request = send_friend_request("u-alice", "u-dan")
    accepted = accept_friend_request(request.id, "u-dan")

    assert accepted.status is FriendRequestStatus.accepted
    assert accepted.responded_at is not None
    assert "u-dan" in data_store.get_profile("u-alice").friends
    assert "u-alice" in data_store.get_profile("u-dan").friends
    assert get_pending_requests("u-dan") == []


def test_reject_leaves_friends_untouched():
    request = send_friend_request("u-alice", "u-dan")
    rejected = reject_friend_request(request.id, "u-dan")

    assert rejected.status is FriendRequestStatus.rejected
    assert "u-dan" not in data_store.get_profile("u-alice").friends


def test_only_pending_requests_can_transition():
    request = send_friend_request("u-alice", "u-dan")
    accept_friend_request(request.id, "u-dan")
    with pytest.raises(InvalidTransition):
        reject_friend_request(request.id, "u-dan")
    with pytest.raises(InvalidTransition):
        accept_friend_request(request.id, "u-dan")


def test_only_recipient_can_respond():
    request = send_friend_request("u-alice", "u-dan")
    with pytest.raises(NotRecipient):
        accept_friend_request(request.id, "u-alice")


def test_unknown_request():
    with pytest.raises(FriendRequestNotFound):
        accept_friend_request("missing", "u-dan")


def test_duplicate_pending_request_in_either_direction():
    send_friend_request("u-alice", "u-dan")
    with pytest.raises(FriendRequestError):
        send_friend_request("u-alice", "u-dan")
    with pytest.raises(FriendRequestError):
        send_friend_request("u-dan", "u-alice")


def test_cannot_befriend_self_or_existing_friend():
    with pytest.raises(FriendRequestError):
        send_friend_request("u-alice", "u-alice")
    with pytest.raises(FriendRequestError):
        send_friend_request("u-alice", "u-bob")


def test_request_to_unknown_user():
    with pytest.raises(FriendRequestNotFound):
        send_friend_request("u-alice", "u-ghost")


def test_remove_friend_is_symmetric():
    remove_friend("u-alice", "u-bob")
    assert "u-bob" not in data_store.get_profile("u-alice").friends
    assert "u-alice" not in data_store.get_profile("u-bob").friends


def test_pending_listing_waits_for_writers():
    send_friend_request("u-alice", "u-dan")
    listed: list[list] = []

    with friend_requests._lock:
        reader = threading.Thread(target=lambda: listed.append(get_pending_requests("u-dan")))
        reader.start()
        reader.join(timeout=0.1)
        assert reader.is_alive()

    reader.join(timeout=5)
    assert [len(requests) for requests in listed] == [1]
