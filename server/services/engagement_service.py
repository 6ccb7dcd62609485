"""
Engagement Service: applies engine decisions to the document store.

Two consistency modes (CONSISTENCY_MODE):

- transactional (default): every operation reads, decides and writes inside
  one store transaction. Follow edges stay symmetric and likeCount stays
  equal to len(likedBy) under concurrent requests.
- fast: decide from a plain read, then write with atomic per-document
  transforms (ArrayUnion/ArrayRemove/Increment). Membership is exactly-once,
  but likeCount can drift under concurrent toggles by the same user, and
  follow/unfollow writes the two user documents independently. A failure
  between those writes leaves a one-sided edge; it is logged, not repaired.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from engagement import (
    BookmarkChange,
    EdgeUpdate,
    NotFound,
    Polarity,
    VoteOutcome,
    add_bookmark,
    ensure_likes,
    ensure_not_self,
    ensure_records,
    ensure_votes,
    plan_follow,
    plan_unfollow,
    remove_bookmark,
    toggle_comment_vote,
    toggle_like,
)

from .document_store import (
    BOOKMARKS,
    COMMENTS,
    POSTS,
    USERS,
    ArrayRemove,
    ArrayUnion,
    DocumentStore,
    Increment,
    Transaction,
)
from ..utils import now_iso

logger = logging.getLogger(__name__)

CONSISTENCY_MODES = ("transactional", "fast")


def _vote_transforms(prefix: str, outcome: VoteOutcome, actor_id: str) -> Dict[str, Any]:
    """Atomic field updates equivalent to one vote toggle (fast mode)."""
    primary, opposing = outcome.polarity.set_fields
    if outcome.added:
        fields: Dict[str, Any] = {
            f"{prefix}.{primary}": ArrayUnion([actor_id]),
            f"{prefix}.{opposing}": ArrayRemove([actor_id]),
        }
    else:
        fields = {f"{prefix}.{primary}": ArrayRemove([actor_id])}
    if outcome.count_delta:
        fields[f"{prefix}.likeCount"] = Increment(outcome.count_delta)
    return fields


class EngagementService:
    """Votes, follows and bookmarks over a DocumentStore."""

    def __init__(self, store: DocumentStore, mode: str = "transactional", clock: Optional[Callable[[], str]] = None):
        if mode not in CONSISTENCY_MODES:
            raise ValueError(f"Unknown consistency mode: {mode!r} (expected one of {CONSISTENCY_MODES})")
        self._store = store
        self.mode = mode
        self._clock = clock or now_iso

    @property
    def transactional(self) -> bool:
        return self.mode == "transactional"

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    def toggle_post_vote(self, post_id: str, actor_id: str, polarity: Polarity) -> VoteOutcome:
        """Like/dislike a post. Returns the outcome with the full next likes state."""
        if self.transactional:
            def _txn(txn: Transaction) -> VoteOutcome:
                post = txn.get(POSTS, post_id)
                if post is None:
                    raise NotFound("Post not found")
                outcome = toggle_like(ensure_likes(post.get("likes")), actor_id, polarity)
                txn.update(POSTS, post_id, {"likes": outcome.state.to_document()})
                return outcome

            outcome = self._store.run_transaction(_txn)
        else:
            post = self._store.get(POSTS, post_id)
            if post is None:
                raise NotFound("Post not found")
            outcome = toggle_like(ensure_likes(post.get("likes")), actor_id, polarity)
            self._store.update(POSTS, post_id, _vote_transforms("likes", outcome, actor_id))
            fresh = self._store.get(POSTS, post_id)
            if fresh is not None:
                outcome.state = ensure_likes(fresh.get("likes"))
        logger.debug("[votes] post=%s actor=%s %s", post_id, actor_id, outcome.message)
        return outcome

    def toggle_comment_vote(self, comment_id: str, actor_id: str, polarity: Polarity) -> VoteOutcome:
        """Upvote/downvote a comment. Returns the outcome with the full next votes state."""
        if self.transactional:
            def _txn(txn: Transaction) -> VoteOutcome:
                comment = txn.get(COMMENTS, comment_id)
                if comment is None:
                    raise NotFound("Comment not found")
                outcome = toggle_comment_vote(ensure_votes(comment.get("votes")), actor_id, polarity)
                txn.update(COMMENTS, comment_id, {"votes": outcome.state.to_document()})
                return outcome

            outcome = self._store.run_transaction(_txn)
        else:
            comment = self._store.get(COMMENTS, comment_id)
            if comment is None:
                raise NotFound("Comment not found")
            outcome = toggle_comment_vote(ensure_votes(comment.get("votes")), actor_id, polarity)
            self._store.update(COMMENTS, comment_id, _vote_transforms("votes", outcome, actor_id))
            fresh = self._store.get(COMMENTS, comment_id)
            if fresh is not None:
                outcome.state = ensure_votes(fresh.get("votes"))
        logger.debug("[votes] comment=%s actor=%s %s", comment_id, actor_id, outcome.message)
        return outcome

    # ------------------------------------------------------------------
    # Follow graph
    # ------------------------------------------------------------------

    def follow(self, follower_id: str, target_id: str) -> EdgeUpdate:
        ensure_not_self(follower_id, target_id, "follow")
        if self.transactional:
            return self._store.run_transaction(
                lambda txn: self._write_edge_txn(txn, follower_id, target_id, plan_follow)
            )
        follower = self._store.get(USERS, follower_id)
        target = self._store.get(USERS, target_id)
        update = plan_follow(follower_id, target_id, follower, target)
        self._write_edge_fast(
            follower_id,
            target_id,
            {"following": ArrayUnion([target_id])},
            {"followers": ArrayUnion([follower_id])},
            "follow",
        )
        return update

    def unfollow(self, follower_id: str, target_id: str) -> EdgeUpdate:
        ensure_not_self(follower_id, target_id, "unfollow")
        if self.transactional:
            return self._store.run_transaction(
                lambda txn: self._write_edge_txn(txn, follower_id, target_id, plan_unfollow)
            )
        follower = self._store.get(USERS, follower_id)
        target = self._store.get(USERS, target_id)
        update = plan_unfollow(follower_id, target_id, follower, target)
        self._write_edge_fast(
            follower_id,
            target_id,
            {"following": ArrayRemove([target_id])},
            {"followers": ArrayRemove([follower_id])},
            "unfollow",
        )
        return update

    def _write_edge_txn(self, txn: Transaction, follower_id: str, target_id: str, plan) -> EdgeUpdate:
        follower = txn.get(USERS, follower_id)
        target = txn.get(USERS, target_id)
        update = plan(follower_id, target_id, follower, target)
        txn.update(USERS, follower_id, {"following": update.following})
        txn.update(USERS, target_id, {"followers": update.followers})
        return update

    def _write_edge_fast(
        self,
        follower_id: str,
        target_id: str,
        follower_fields: Dict[str, Any],
        target_fields: Dict[str, Any],
        action: str,
    ) -> None:
        self._store.update(USERS, follower_id, follower_fields)
        try:
            self._store.update(USERS, target_id, target_fields)
        except Exception:
            logger.error(
                "[%s] partial write: %s.following updated but %s.followers was not",
                action,
                follower_id,
                target_id,
            )
            raise

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def get_bookmarks(self, user_id: str) -> List[Dict[str, Any]]:
        doc = self._store.get(BOOKMARKS, user_id)
        return [r.to_document() for r in ensure_records(doc.get("posts") if doc else None)]

    def all_bookmarks(self) -> Dict[str, List[Dict[str, Any]]]:
        """Every user's bookmark list keyed by userId (admin view; reads the whole collection)."""
        return {doc["id"]: doc.get("posts") or [] for doc in self._store.list(BOOKMARKS)}

    def add_bookmark(self, user_id: str, post_id: str) -> BookmarkChange:
        now = self._clock()
        if self.transactional:
            def _txn(txn: Transaction) -> BookmarkChange:
                if txn.get(POSTS, post_id) is None:
                    raise NotFound("Post not found")
                doc = txn.get(BOOKMARKS, user_id)
                change = add_bookmark(doc.get("posts") if doc else None, user_id, post_id, now)
                if change.created:
                    txn.set(BOOKMARKS, user_id, {
                        "userId": user_id,
                        "posts": change.to_documents(),
                        "createdAt": now,
                        "updatedAt": now,
                    })
                else:
                    txn.update(BOOKMARKS, user_id, {"posts": change.to_documents(), "updatedAt": now})
                return change

            return self._store.run_transaction(_txn)

        if self._store.get(POSTS, post_id) is None:
            raise NotFound("Post not found")
        doc = self._store.get(BOOKMARKS, user_id)
        change = add_bookmark(doc.get("posts") if doc else None, user_id, post_id, now)
        fields: Dict[str, Any] = {
            "userId": user_id,
            "posts": ArrayUnion([change.record.to_document()]),
            "updatedAt": now,
        }
        if change.created:
            fields["createdAt"] = now
        # merge so two first-time bookmarks racing each other both land
        self._store.set(BOOKMARKS, user_id, fields, merge=True)
        return change

    def remove_bookmark(self, user_id: str, post_id: str) -> BookmarkChange:
        now = self._clock()
        if self.transactional:
            def _txn(txn: Transaction) -> BookmarkChange:
                doc = txn.get(BOOKMARKS, user_id)
                change = remove_bookmark(doc.get("posts") if doc else None, post_id)
                txn.update(BOOKMARKS, user_id, {"posts": change.to_documents(), "updatedAt": now})
                return change

            return self._store.run_transaction(_txn)

        doc = self._store.get(BOOKMARKS, user_id)
        change = remove_bookmark(doc.get("posts") if doc else None, post_id)
        self._store.update(BOOKMARKS, user_id, {"posts": change.to_documents(), "updatedAt": now})
        return change
