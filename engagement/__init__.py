"""
Engagement state engine.

Pure functions over the current state of a post, comment, user pair or
bookmark list; they return the next state and never touch storage.
"""

from .bookmarks import BookmarkChange, add_bookmark, is_bookmarked, remove_bookmark
from .errors import (
    Conflict,
    EngagementError,
    Internal,
    InvalidInput,
    InvalidOperation,
    NotFound,
    Unauthenticated,
    Unauthorized,
)
from .follows import EdgeUpdate, ensure_not_self, is_following, plan_follow, plan_unfollow
from .models import BookmarkRecord, Likes, Votes, ensure_likes, ensure_records, ensure_votes
from .votes import (
    COMMENT_POLARITIES,
    POST_POLARITIES,
    MembershipChange,
    Polarity,
    VoteOutcome,
    toggle_comment_vote,
    toggle_like,
    toggle_membership,
)

__all__ = [
    "BookmarkChange",
    "BookmarkRecord",
    "COMMENT_POLARITIES",
    "Conflict",
    "EdgeUpdate",
    "EngagementError",
    "Internal",
    "InvalidInput",
    "InvalidOperation",
    "Likes",
    "MembershipChange",
    "NotFound",
    "POST_POLARITIES",
    "Polarity",
    "Unauthenticated",
    "Unauthorized",
    "VoteOutcome",
    "Votes",
    "add_bookmark",
    "ensure_likes",
    "ensure_not_self",
    "ensure_records",
    "ensure_votes",
    "is_bookmarked",
    "is_following",
    "plan_follow",
    "plan_unfollow",
    "remove_bookmark",
    "toggle_comment_vote",
    "toggle_like",
    "toggle_membership",
]
