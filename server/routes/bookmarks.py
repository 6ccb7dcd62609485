"""
Bookmarks: one document per user, keyed by userId.

Mutations return only the caller's updated list. The every-user snapshot is
served by GET /api/bookmarks, and only when BOOKMARKS_ADMIN_VIEW is on.
"""

import logging

from fastapi import APIRouter, Depends

from engagement.errors import NotFound, Unauthorized

try:
    from ..dependencies import current_identity
    from ..services import UserIdentity
    from ..state import get_state
except ImportError:
    from dependencies import current_identity
    from services import UserIdentity
    from state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_self(user_id: str, identity: UserIdentity) -> None:
    if user_id != identity.uid:
        raise Unauthorized("You can only manage your own bookmarks")


@router.get("")
def all_bookmarks(identity: UserIdentity = Depends(current_identity)):
    """Admin view: bookmarks of every user grouped by userId."""
    state = get_state()
    if not state.config.bookmarks_admin_view:
        raise NotFound("Not found")
    logger.info("[bookmarks] admin view requested by %s", identity.uid)
    return {"allBookmarks": state.engagement.all_bookmarks()}


@router.get("/{user_id}")
def get_bookmarks(user_id: str, identity: UserIdentity = Depends(current_identity)):
    _require_self(user_id, identity)
    return {"userBookmarks": get_state().engagement.get_bookmarks(user_id)}


@router.post("/{user_id}/{post_id}")
def add_bookmark(user_id: str, post_id: str, identity: UserIdentity = Depends(current_identity)):
    _require_self(user_id, identity)
    change = get_state().engagement.add_bookmark(user_id, post_id)
    return {"message": "Post bookmarked successfully", "userBookmarks": change.to_documents()}


@router.delete("/{user_id}/{post_id}")
def remove_bookmark(user_id: str, post_id: str, identity: UserIdentity = Depends(current_identity)):
    _require_self(user_id, identity)
    change = get_state().engagement.remove_bookmark(user_id, post_id)
    message = "Post removed from bookmarks" if change.removed else "Post was not bookmarked"
    return {"message": message, "userBookmarks": change.to_documents()}
