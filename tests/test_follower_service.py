"""FollowerService: request lifecycle and notifications."""

from unittest.mock import MagicMock

import pytest

from models.follower import Follower
from models.user import User
from repositories.errors import UserNotFound
from services.errors import (
    AlreadyFollowing,
    CannotFollowSelf,
    FollowRequestPending,
    NoPendingFollowRequest,
    NotFollowing,
)
from services.follower_service import FollowerService


@pytest.fixture()
def service():
    svc = FollowerService(
        follower_repo=MagicMock(), user_repo=MagicMock(), notification_service=MagicMock()
    )
    svc.follower_repo.find_follow.return_value = None
    svc.follower_repo.create_follow_request.side_effect = (
        lambda follower, following, status: Follower(follower, following, status)
    )
    return svc


def _user(user_id, is_private=False):
    return User(id=user_id, username=user_id, email="", is_private=is_private)


def test_following_public_account_is_accepted_immediately(service):
    service.user_repo.get_by_id.return_value = _user("bob")

    follow = service.request_follow("alice", "bob")

    assert follow.is_accepted()
    service.notification_service.create.assert_not_called()


def test_following_private_account_creates_request_and_notifies(service):
    service.user_repo.get_by_id.side_effect = lambda uid: _user(uid, is_private=(uid == "bob"))

    follow = service.request_follow("alice", "bob")

    assert follow.is_pending()
    kwargs = service.notification_service.create.call_args.kwargs
    assert kwargs["user_id"] == "bob"
    assert kwargs["type"] == "follow_request"
    assert kwargs["entity_type"] == "user"
    assert kwargs["entity_id"] == "alice"


def test_cannot_follow_self(service):
    with pytest.raises(CannotFollowSelf):
        service.request_follow("alice", "alice")


def test_cannot_follow_unknown_user(service):
    service.user_repo.get_by_id.side_effect = UserNotFound()
    with pytest.raises(UserNotFound):
        service.request_follow("alice", "ghost")


@pytest.mark.parametrize("status,error", [
    ("accepted", AlreadyFollowing),
    ("pending", FollowRequestPending),
])
def test_existing_edge_blocks_new_request(service, status, error):
    service.user_repo.get_by_id.return_value = _user("bob")
    service.follower_repo.find_follow.return_value = Follower("alice", "bob", status)
    with pytest.raises(error):
        service.request_follow("alice", "bob")
    service.follower_repo.create_follow_request.assert_not_called()


def test_accept_requires_pending_request(service):
    service.follower_repo.find_follow.return_value = Follower("alice", "bob", "pending")
    service.accept_follow("bob", "alice")
    service.follower_repo.update_follow_status.assert_called_once_with("alice", "bob", "accepted")

    service.follower_repo.find_follow.return_value = Follower("alice", "bob", "accepted")
    with pytest.raises(NoPendingFollowRequest):
        service.accept_follow("bob", "alice")


def test_reject_deletes_request(service):
    service.follower_repo.find_follow.return_value = Follower("alice", "bob", "pending")
    service.reject_follow("bob", "alice")
    service.follower_repo.delete_follow.assert_called_once_with("alice", "bob")


def test_unfollow_requires_accepted_follow(service):
    service.follower_repo.find_follow.return_value = Follower("alice", "bob", "pending")
    with pytest.raises(NotFollowing):
        service.unfollow("alice", "bob")

    service.follower_repo.find_follow.return_value = Follower("alice", "bob", "accepted")
    service.unfollow("alice", "bob")
    service.follower_repo.delete_follow.assert_called_once_with("alice", "bob")


def test_pending_requests_split_by_direction(service):
    service.follower_repo.get_pending_received_requests.return_value = ["in"]
    service.follower_repo.get_pending_sent_requests.return_value = ["out"]
    assert service.list_pending_requests("alice") == {"received": ["in"], "sent": ["out"]}


def test_listing_clamps_page_size(service):
    service.list_followers("alice", limit=10_000, offset=-5)
    service.follower_repo.get_followers.assert_called_once_with("alice", 100, 0)


def test_follow_request_message_uses_full_name(service):
    service.user_repo.get_by_id.side_effect = lambda uid: User(
        id=uid, username=uid, email="", first_name="Alice", last_name="Liddell",
        is_private=(uid == "bob"),
    )
    service.request_follow("alice", "bob")

    message = service.notification_service.create.call_args.kwargs["message"]
    assert message == "Alice Liddell wants to follow you"
