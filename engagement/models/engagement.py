"""
Engagement sub-objects stored on posts and comments.

Post documents carry ``likes = {likeCount, likedBy, dislikedBy}`` and comment
documents carry ``votes = {upvotedBy, downvotedBy}``. Both are created with
their defaults when the entity is created; ensure_likes/ensure_votes also
accept legacy documents where the field is missing or partial.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Likes(BaseModel):
    """Like/dislike state of a post. like_count mirrors len(liked_by)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    like_count: int = 0
    liked_by: List[str] = []
    disliked_by: List[str] = []

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Votes(BaseModel):
    """Up/down vote state of a comment."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    upvoted_by: List[str] = []
    downvoted_by: List[str] = []

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def ensure_likes(value: Optional[Dict[str, Any]]) -> Likes:
    return Likes.model_validate(value or {})


def ensure_votes(value: Optional[Dict[str, Any]]) -> Votes:
    return Votes.model_validate(value or {})
