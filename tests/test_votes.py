"""
Vote Toggle Tests

Pure engine tests for likes/dislikes on posts and upvotes/downvotes on comments.

Test Scenarios:
---------------
1. Like twice -> back to the starting state, likeCount 0
2. Like then dislike -> actor moves from likedBy to dislikedBy, likeCount drops
3. Dislike never changes likeCount unless it removes a like
4. Comment votes are mutually exclusive
5. Legacy documents (missing fields, duplicate ids) are normalized
6. Concurrent toggles in transactional mode: one entry per actor, likeCount == len(likedBy)

Run:
----
    pytest tests/test_votes.py -v
"""

import pytest

from engagement import (
    Likes,
    Polarity,
    Votes,
    ensure_likes,
    ensure_votes,
    toggle_comment_vote,
    toggle_like,
    toggle_membership,
)
from server.services import EngagementService, MemoryDocumentStore

from conftest import run_concurrently, seed_comment, seed_post


class TestToggleMembership:
    def test_adds_absent_actor(self):
        change = toggle_membership(["a"], [], "b")
        assert change.added is True
        assert change.primary == ["a", "b"]
        assert change.removed_from_opposing is False

    def test_removes_present_actor(self):
        change = toggle_membership(["a", "b"], ["c"], "b")
        assert change.added is False
        assert change.primary == ["a"]
        assert change.opposing == ["c"]

    def test_moves_actor_out_of_opposing(self):
        change = toggle_membership([], ["b", "c"], "b")
        assert change.primary == ["b"]
        assert change.opposing == ["c"]
        assert change.removed_from_opposing is True

    def test_removing_heals_duplicates(self):
        change = toggle_membership(["b", "a", "b"], [], "b")
        assert change.primary == ["a"]

    def test_inputs_are_not_mutated(self):
        primary, opposing = ["a"], ["b"]
        toggle_membership(primary, opposing, "b")
        assert primary == ["a"]
        assert opposing == ["b"]


class TestToggleLike:
    def test_like_then_like_again_restores_state(self):
        first = toggle_like(Likes(), "u1", Polarity.LIKE)
        assert first.message == "Post liked"
        assert first.state.like_count == 1
        assert first.state.liked_by == ["u1"]
        assert first.count_delta == 1

        second = toggle_like(first.state, "u1", Polarity.LIKE)
        assert second.message == "Like removed"
        assert second.state == Likes()
        assert second.count_delta == -1

    def test_like_then_dislike_switches(self):
        liked = toggle_like(Likes(), "u1", Polarity.LIKE).state
        outcome = toggle_like(liked, "u1", Polarity.DISLIKE)
        assert outcome.message == "Post disliked"
        assert outcome.switched is True
        assert outcome.state.liked_by == []
        assert outcome.state.disliked_by == ["u1"]
        assert outcome.state.like_count == 0

    def test_dislike_alone_leaves_count(self):
        likes = Likes(like_count=2, liked_by=["a", "b"])
        outcome = toggle_like(likes, "c", Polarity.DISLIKE)
        assert outcome.state.like_count == 2
        assert outcome.state.disliked_by == ["c"]
        assert outcome.count_delta == 0

    def test_undislike(self):
        likes = Likes(disliked_by=["u1"])
        outcome = toggle_like(likes, "u1", Polarity.DISLIKE)
        assert outcome.message == "Dislike removed"
        assert outcome.added is False
        assert outcome.state.disliked_by == []

    def test_count_tracks_liked_by_for_many_actors(self):
        state = Likes()
        for actor in ["a", "b", "c", "d"]:
            state = toggle_like(state, actor, Polarity.LIKE).state
        state = toggle_like(state, "b", Polarity.DISLIKE).state
        state = toggle_like(state, "c", Polarity.LIKE).state
        assert state.liked_by == ["a", "d"]
        assert state.like_count == len(state.liked_by)

    def test_count_never_negative(self):
        likes = Likes(like_count=0, liked_by=["u1"])
        outcome = toggle_like(likes, "u1", Polarity.LIKE)
        assert outcome.state.like_count == 0

    def test_rejects_comment_polarity(self):
        with pytest.raises(ValueError):
            toggle_like(Likes(), "u1", Polarity.UPVOTE)


class TestToggleCommentVote:
    def test_upvote_toggle(self):
        up = toggle_comment_vote(Votes(), "u1", Polarity.UPVOTE)
        assert up.message == "Upvoted successfully"
        assert up.state.upvoted_by == ["u1"]

        removed = toggle_comment_vote(up.state, "u1", Polarity.UPVOTE)
        assert removed.message == "Upvote removed"
        assert removed.state.upvoted_by == []

    def test_downvote_moves_upvote(self):
        votes = Votes(upvoted_by=["u1", "u2"])
        outcome = toggle_comment_vote(votes, "u1", Polarity.DOWNVOTE)
        assert outcome.message == "Downvoted successfully"
        assert outcome.state.upvoted_by == ["u2"]
        assert outcome.state.downvoted_by == ["u1"]
        assert outcome.switched is True

    def test_remove_downvote(self):
        outcome = toggle_comment_vote(Votes(downvoted_by=["u1"]), "u1", Polarity.DOWNVOTE)
        assert outcome.message == "Downvote removed"
        assert outcome.state.downvoted_by == []

    def test_rejects_post_polarity(self):
        with pytest.raises(ValueError):
            toggle_comment_vote(Votes(), "u1", Polarity.LIKE)


class TestLegacyDocuments:
    def test_missing_likes(self):
        assert ensure_likes(None) == Likes()

    def test_partial_likes(self):
        likes = ensure_likes({"likedBy": ["a"]})
        assert likes.liked_by == ["a"]
        assert likes.disliked_by == []
        assert likes.like_count == 0

    def test_votes_document_round_trip_uses_camel_case(self):
        votes = ensure_votes({"upvotedBy": ["a"]})
        assert votes.to_document() == {"upvotedBy": ["a"], "downvotedBy": []}

    def test_likes_document_keys(self):
        assert set(Likes().to_document()) == {"likeCount", "likedBy", "dislikedBy"}


class TestConcurrentToggles:
    """Transactional mode serializes racing toggles on one document."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.store = MemoryDocumentStore()
        self.service = EngagementService(self.store, mode="transactional")
        seed_post(self.store, "p1")
        seed_comment(self.store, "c1", post_id="p1")

    def _likes(self):
        return self.store.get("posts", "p1")["likes"]

    def test_many_actors_like_at_once(self):
        actors = [f"u{i}" for i in range(50)]
        results = run_concurrently(self.service.toggle_post_vote, [("p1", a, Polarity.LIKE) for a in actors])

        assert not [r for r in results if isinstance(r, Exception)]
        likes = self._likes()
        assert sorted(likes["likedBy"]) == sorted(actors)
        assert likes["likeCount"] == len(likes["likedBy"]) == 50

    def test_same_actor_even_toggles_cancel_out(self):
        run_concurrently(self.service.toggle_post_vote, [("p1", "u1", Polarity.LIKE)] * 20)
        assert self._likes() == {"likeCount": 0, "likedBy": [], "dislikedBy": []}

    def test_same_actor_odd_toggles_leave_one_entry(self):
        run_concurrently(self.service.toggle_post_vote, [("p1", "u1", Polarity.LIKE)] * 21)
        assert self._likes() == {"likeCount": 1, "likedBy": ["u1"], "dislikedBy": []}

    def test_racing_like_and_dislike_stay_exclusive(self):
        calls = [("p1", "u1", Polarity.LIKE if i % 2 else Polarity.DISLIKE) for i in range(30)]
        run_concurrently(self.service.toggle_post_vote, calls)
        likes = self._likes()
        assert len(likes["likedBy"]) + len(likes["dislikedBy"]) <= 1
        assert likes["likeCount"] == len(likes["likedBy"])

    def test_racing_comment_votes_stay_exclusive(self):
        calls = [("c1", "u1", Polarity.UPVOTE if i % 2 else Polarity.DOWNVOTE) for i in range(30)]
        calls += [("c1", f"v{i}", Polarity.UPVOTE) for i in range(20)]
        run_concurrently(self.service.toggle_comment_vote, calls)
        votes = self.store.get("comments", "c1")["votes"]
        assert votes["upvotedBy"].count("u1") + votes["downvotedBy"].count("u1") <= 1
        assert sorted(v for v in votes["upvotedBy"] if v != "u1") == sorted(f"v{i}" for i in range(20))
