"""Data models for the engagement engine."""

from .bookmark import BookmarkRecord, ensure_records
from .engagement import Likes, Votes, ensure_likes, ensure_votes

__all__ = [
    "BookmarkRecord",
    "Likes",
    "Votes",
    "ensure_likes",
    "ensure_records",
    "ensure_votes",
]
