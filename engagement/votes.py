"""
Vote toggling: likes/dislikes on posts, upvotes/downvotes on comments.

Both share one shape: the actor's id lives in at most one of two sets, the
set matching the requested polarity (primary) and the other one (opposing).
Repeating the same vote removes it; voting the other way moves the actor.
Posts additionally keep likeCount in step with likedBy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from .models import Likes, Votes


class Polarity(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def set_fields(self) -> Tuple[str, str]:
        """(primary, opposing) document field names for this polarity."""
        return _SET_FIELDS[self]


_SET_FIELDS = {
    Polarity.LIKE: ("likedBy", "dislikedBy"),
    Polarity.DISLIKE: ("dislikedBy", "likedBy"),
    Polarity.UPVOTE: ("upvotedBy", "downvotedBy"),
    Polarity.DOWNVOTE: ("downvotedBy", "upvotedBy"),
}

# (added, removed) response messages
_MESSAGES = {
    Polarity.LIKE: ("Post liked", "Like removed"),
    Polarity.DISLIKE: ("Post disliked", "Dislike removed"),
    Polarity.UPVOTE: ("Upvoted successfully", "Upvote removed"),
    Polarity.DOWNVOTE: ("Downvoted successfully", "Downvote removed"),
}

POST_POLARITIES = (Polarity.LIKE, Polarity.DISLIKE)
COMMENT_POLARITIES = (Polarity.UPVOTE, Polarity.DOWNVOTE)


@dataclass
class MembershipChange:
    """Next contents of the primary and opposing sets after one toggle."""

    primary: List[str]
    opposing: List[str]
    added: bool
    removed_from_opposing: bool = False


@dataclass
class VoteOutcome:
    """Result of a vote toggle: the next engagement state plus what happened."""

    polarity: Polarity
    added: bool
    message: str
    state: Union[Likes, Votes]
    count_delta: int = 0
    switched: bool = False


def toggle_membership(primary: List[str], opposing: List[str], actor_id: str) -> MembershipChange:
    """
    Toggle actor_id in primary while keeping it out of opposing.

    Present in primary: removed (every occurrence, so legacy duplicates heal).
    Absent: appended once and removed from opposing.
    """
    if actor_id in primary:
        return MembershipChange(
            primary=[u for u in primary if u != actor_id],
            opposing=list(opposing),
            added=False,
        )
    next_opposing = [u for u in opposing if u != actor_id]
    return MembershipChange(
        primary=list(primary) + [actor_id],
        opposing=next_opposing,
        added=True,
        removed_from_opposing=len(next_opposing) != len(opposing),
    )


def _message(polarity: Polarity, added: bool) -> str:
    added_msg, removed_msg = _MESSAGES[polarity]
    return added_msg if added else removed_msg


def toggle_like(likes: Likes, actor_id: str, polarity: Polarity) -> VoteOutcome:
    """Apply a like or dislike from actor_id to a post's likes."""
    if polarity not in POST_POLARITIES:
        raise ValueError(f"Posts accept like/dislike, got {polarity.value!r}")
    if polarity is Polarity.LIKE:
        change = toggle_membership(likes.liked_by, likes.disliked_by, actor_id)
        liked_by, disliked_by = change.primary, change.opposing
    else:
        change = toggle_membership(likes.disliked_by, likes.liked_by, actor_id)
        disliked_by, liked_by = change.primary, change.opposing

    # likeCount moves only with likedBy: -1 when a like is removed or switched away
    delta = len(liked_by) - len(likes.liked_by)
    state = Likes(
        like_count=max(likes.like_count + delta, 0),
        liked_by=liked_by,
        disliked_by=disliked_by,
    )
    return VoteOutcome(
        polarity=polarity,
        added=change.added,
        message=_message(polarity, change.added),
        state=state,
        count_delta=delta,
        switched=change.removed_from_opposing,
    )


def toggle_comment_vote(votes: Votes, actor_id: str, polarity: Polarity) -> VoteOutcome:
    """Apply an upvote or downvote from actor_id to a comment's votes."""
    if polarity not in COMMENT_POLARITIES:
        raise ValueError(f"Comments accept upvote/downvote, got {polarity.value!r}")
    if polarity is Polarity.UPVOTE:
        change = toggle_membership(votes.upvoted_by, votes.downvoted_by, actor_id)
        upvoted_by, downvoted_by = change.primary, change.opposing
    else:
        change = toggle_membership(votes.downvoted_by, votes.upvoted_by, actor_id)
        downvoted_by, upvoted_by = change.primary, change.opposing
    return VoteOutcome(
        polarity=polarity,
        added=change.added,
        message=_message(polarity, change.added),
        state=Votes(upvoted_by=upvoted_by, downvoted_by=downvoted_by),
        switched=change.removed_from_opposing,
    )
