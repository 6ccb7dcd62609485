"""
Bookmark set: one document per user holding a list of bookmark records.

The document is created lazily on the first bookmark. A post appears at most
once in a user's list; adding it again is a Conflict.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import Conflict, NotFound
from .models import BookmarkRecord, ensure_records


@dataclass
class BookmarkChange:
    posts: List[BookmarkRecord]
    record: Optional[BookmarkRecord] = None
    created: bool = False
    removed: bool = False

    def to_documents(self) -> List[Dict[str, Any]]:
        return [r.to_document() for r in self.posts]


def is_bookmarked(posts: List[BookmarkRecord], post_id: str) -> bool:
    return any(r.post_id == post_id for r in posts)


def add_bookmark(
    existing: Optional[List[Dict[str, Any]]],
    user_id: str,
    post_id: str,
    now: str,
) -> BookmarkChange:
    """
    Add post_id to a user's bookmarks.

    existing is the stored ``posts`` list, or None when the user has no
    bookmark document yet (created=True in the result).
    """
    posts = ensure_records(existing)
    if is_bookmarked(posts, post_id):
        raise Conflict("Post already bookmarked")
    record = BookmarkRecord(post_id=post_id, bookmarked_at=now, bookmarked_by=user_id)
    return BookmarkChange(posts=posts + [record], record=record, created=existing is None)


def remove_bookmark(existing: Optional[List[Dict[str, Any]]], post_id: str) -> BookmarkChange:
    if not existing:
        raise NotFound("No bookmarks found for this user")
    posts = ensure_records(existing)
    kept = [r for r in posts if r.post_id != post_id]
    return BookmarkChange(posts=kept, removed=len(kept) != len(posts))
