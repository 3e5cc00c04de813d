"""PostService and CommentService: validation, visibility and ownership."""

from unittest.mock import MagicMock

import pytest

from models.follower import Follower
from models.post import Comment, Post
from repositories.errors import PostNotFound
from services.comment_service import CommentService
from services.errors import CommentForbidden, GroupMemberRequired, PostForbidden, ValidationError
from services.post_service import PostService


@pytest.fixture()
def posts():
    svc = PostService(post_repo=MagicMock(), group_repo=MagicMock(), follower_repo=MagicMock())
    svc.post_repo.create.side_effect = lambda post: post
    return svc


def _post(privacy="public", group_id=None, author="author"):
    return Post(id="p1", user_id=author, title="t", content="c", privacy=privacy, group_id=group_id)


# ── create ────────────────────────────────────────────────

def test_group_post_requires_membership_and_is_public(posts):
    posts.group_repo.is_member.return_value = False
    with pytest.raises(GroupMemberRequired):
        posts.create("u1", "t", "c", group_id="g1")

    posts.group_repo.is_member.return_value = True
    post = posts.create("u1", "t", "c", privacy="private", group_id="g1", allowed_user_ids=["u2"])
    assert post.privacy == "public"
    assert post.allowed_user_ids == []


def test_private_post_needs_allow_list(posts):
    with pytest.raises(ValidationError):
        posts.create("u1", "t", "c", privacy="private")
    post = posts.create("u1", "t", "c", privacy="private", allowed_user_ids=["u2"])
    assert post.allowed_user_ids == ["u2"]


@pytest.mark.parametrize("title,content,privacy", [
    ("", "c", "public"),
    ("t", "  ", "public"),
    ("t", "c", "friends_only"),
])
def test_create_rejects_invalid_input(posts, title, content, privacy):
    with pytest.raises(ValidationError):
        posts.create("u1", title, content, privacy=privacy)


# ── visibility ────────────────────────────────────────────

def test_public_and_own_posts_are_visible(posts):
    posts.post_repo.get_by_id.return_value = _post("public")
    assert posts.get_by_id("p1", "stranger").id == "p1"

    posts.post_repo.get_by_id.return_value = _post("private")
    assert posts.get_by_id("p1", "author").id == "p1"


def test_almost_private_needs_accepted_follow(posts):
    posts.post_repo.get_by_id.return_value = _post("almost_private")

    posts.follower_repo.find_follow.return_value = Follower("viewer", "author", "pending")
    with pytest.raises(PostNotFound):
        posts.get_by_id("p1", "viewer")

    posts.follower_repo.find_follow.return_value = Follower("viewer", "author", "accepted")
    assert posts.get_by_id("p1", "viewer").privacy == "almost_private"


def test_private_needs_allow_list_entry(posts):
    posts.post_repo.get_by_id.return_value = _post("private")
    posts.post_repo.is_user_allowed.return_value = False
    with pytest.raises(PostNotFound):
        posts.get_by_id("p1", "viewer")
    posts.post_repo.is_user_allowed.assert_called_once_with("p1", "viewer")


def test_group_post_visible_only_to_members(posts):
    posts.post_repo.get_by_id.return_value = _post(group_id="g1")
    posts.group_repo.is_member.return_value = False
    with pytest.raises(PostNotFound):
        posts.get_by_id("p1", "author")


def test_group_feed_empty_for_non_members(posts):
    posts.group_repo.is_member.return_value = False
    assert posts.list_group_posts("g1", "outsider") == []
    posts.post_repo.list_by_group.assert_not_called()


# ── delete ────────────────────────────────────────────────

def test_owner_deletes_post_and_allow_list(posts):
    posts.post_repo.get_by_id.return_value = _post("private")
    posts.delete("p1", "author")
    posts.post_repo.remove_allowed_users.assert_called_once_with("p1")
    posts.post_repo.delete.assert_called_once_with("p1")


def test_group_admin_may_delete_group_post(posts):
    posts.post_repo.get_by_id.return_value = _post(group_id="g1")
    posts.group_repo.is_admin.return_value = True
    posts.delete("p1", "admin")
    posts.post_repo.delete.assert_called_once_with("p1")


def test_stranger_cannot_delete(posts):
    posts.post_repo.get_by_id.return_value = _post()
    with pytest.raises(PostForbidden):
        posts.delete("p1", "stranger")
    posts.post_repo.delete.assert_not_called()


# ── comments ──────────────────────────────────────────────

@pytest.fixture()
def comments():
    svc = CommentService(
        comment_repo=MagicMock(), post_service=MagicMock(), post_repo=MagicMock(), group_repo=MagicMock()
    )
    svc.comment_repo.create.side_effect = lambda comment: comment
    return svc


def test_comment_length_limits(comments):
    with pytest.raises(ValidationError):
        comments.create("p1", "u1", "   ")
    with pytest.raises(ValidationError):
        comments.create("p1", "u1", "x" * 501)
    assert comments.create("p1", "u1", "x" * 500).content == "x" * 500


def test_comment_on_hidden_post_fails(comments):
    comments.post_service.get_by_id.side_effect = PostNotFound()
    with pytest.raises(PostNotFound):
        comments.create("p1", "u1", "hello")
    comments.comment_repo.create.assert_not_called()


def test_listing_comments_checks_visibility(comments):
    comments.list_by_post("p1", "viewer")
    comments.post_service.get_by_id.assert_called_once_with("p1", "viewer")
    comments.comment_repo.list_by_post.assert_called_once_with("p1", 20, 0)


def test_comment_deletion_rules(comments):
    comments.comment_repo.get_by_id.return_value = Comment(id="c1", post_id="p1", user_id="author", content="x")

    comments.delete("c1", "author")
    comments.comment_repo.delete.assert_called_once_with("c1")

    comments.post_repo.get_by_id.return_value = _post()
    with pytest.raises(CommentForbidden):
        comments.delete("c1", "stranger")

    comments.post_repo.get_by_id.return_value = _post(group_id="g1")
    comments.group_repo.is_admin.return_value = True
    comments.delete("c1", "group-admin")
    assert comments.comment_repo.delete.call_count == 2
