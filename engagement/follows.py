"""
Follow graph: symmetric edges stored on both user documents.

An edge A -> B is recorded twice: B in A.following and A in B.followers.
plan_follow/plan_unfollow validate a request against the two current user
documents and return the next contents of both lists; writing them is up to
the caller (two updates, or one transaction).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import Conflict, InvalidOperation, NotFound


@dataclass
class EdgeUpdate:
    """Next follower.following and target.followers after a follow/unfollow."""

    following: List[str]
    followers: List[str]

    def to_response(self) -> Dict[str, List[str]]:
        return {"following": self.following, "followers": self.followers}


def ensure_not_self(follower_id: str, target_id: str, action: str = "follow") -> None:
    if follower_id == target_id:
        raise InvalidOperation(f"You cannot {action} yourself")


def _require_users(follower: Optional[Dict[str, Any]], target: Optional[Dict[str, Any]]) -> None:
    if follower is None or target is None:
        raise NotFound("User not found")


def is_following(follower: Dict[str, Any], target_id: str) -> bool:
    return target_id in (follower.get("following") or [])


def plan_follow(
    follower_id: str,
    target_id: str,
    follower: Optional[Dict[str, Any]],
    target: Optional[Dict[str, Any]],
) -> EdgeUpdate:
    ensure_not_self(follower_id, target_id, "follow")
    _require_users(follower, target)
    if is_following(follower, target_id):
        raise Conflict("You are already following this user")

    following = list(follower.get("following") or [])
    following.append(target_id)
    followers = list(target.get("followers") or [])
    # a half-written earlier edge may already have put the follower here
    if follower_id not in followers:
        followers.append(follower_id)
    return EdgeUpdate(following=following, followers=followers)


def plan_unfollow(
    follower_id: str,
    target_id: str,
    follower: Optional[Dict[str, Any]],
    target: Optional[Dict[str, Any]],
) -> EdgeUpdate:
    ensure_not_self(follower_id, target_id, "unfollow")
    _require_users(follower, target)
    if not is_following(follower, target_id):
        raise Conflict("User is not being followed")

    return EdgeUpdate(
        following=[u for u in follower.get("following") or [] if u != target_id],
        followers=[u for u in target.get("followers") or [] if u != follower_id],
    )
