"""Posts: CRUD, like/dislike toggles and comment cleanup."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from engagement import Polarity
from engagement.errors import InvalidInput

try:
    from ..dependencies import current_identity, load_author, load_document, require_owner
    from ..documents import new_post
    from ..models import PostCreateRequest, PostUpdateRequest
    from ..services import COMMENTS, POSTS, UserIdentity
    from ..state import get_state
    from ..utils import newest_first, now_iso
except ImportError:
    from dependencies import current_identity, load_author, load_document, require_owner
    from documents import new_post
    from models import PostCreateRequest, PostUpdateRequest
    from services import COMMENTS, POSTS, UserIdentity
    from state import get_state
    from utils import newest_first, now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_post(post_id: str) -> dict:
    return load_document(POSTS, post_id, "Post")


def _require_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidInput("Post content is required")
    return content


@router.get("")
def list_posts(user_id: Optional[str] = Query(None, alias="userId")):
    """All posts newest first; ?userId= limits to one author."""
    store = get_state().store
    posts = store.query(POSTS, "userId", user_id) if user_id else store.list(POSTS)
    return newest_first(posts)


@router.post("", status_code=201)
def create_post(request: PostCreateRequest, identity: UserIdentity = Depends(current_identity)):
    content = _require_content(request.content)
    store = get_state().store
    doc = new_post(load_author(identity), content, now_iso())
    post_id = store.add(POSTS, doc)
    logger.info("[posts] %s created by %s", post_id, identity.uid)
    return {**doc, "id": post_id}


@router.get("/{post_id}")
def get_post(post_id: str):
    return _load_post(post_id)


@router.put("/{post_id}")
def update_post(
    post_id: str,
    request: PostUpdateRequest,
    identity: UserIdentity = Depends(current_identity),
):
    post = _load_post(post_id)
    require_owner(post, identity, "You can only edit your own posts")
    store = get_state().store
    store.update(POSTS, post_id, {"content": _require_content(request.content), "updatedAt": now_iso()})
    return store.get(POSTS, post_id)


def _comment_refs(post_id: str):
    return [(COMMENTS, c["id"]) for c in get_state().store.query(COMMENTS, "postId", post_id)]


@router.delete("/{post_id}")
def delete_post(post_id: str, identity: UserIdentity = Depends(current_identity)):
    """Delete a post and its comments in one batch."""
    post = _load_post(post_id)
    require_owner(post, identity, "You can only delete your own posts")
    comment_refs = _comment_refs(post_id)
    get_state().store.batch_delete(comment_refs + [(POSTS, post_id)])
    logger.info("[posts] %s deleted with %d comments", post_id, len(comment_refs))
    return {"message": "Post deleted successfully", "deletedComments": len(comment_refs)}


@router.delete("/{post_id}/comments")
def delete_post_comments(post_id: str, identity: UserIdentity = Depends(current_identity)):
    """Remove every comment on a post (post owner only)."""
    post = _load_post(post_id)
    require_owner(post, identity, "You can only clear comments on your own posts")
    comment_refs = _comment_refs(post_id)
    store = get_state().store
    store.batch_delete(comment_refs)
    store.update(POSTS, post_id, {"comments": [], "updatedAt": now_iso()})
    return {"message": "Comments deleted successfully", "deletedCount": len(comment_refs)}


def _vote(post_id: str, identity: UserIdentity, polarity: Polarity) -> dict:
    outcome = get_state().engagement.toggle_post_vote(post_id, identity.uid, polarity)
    return {"message": outcome.message, "likes": outcome.state.to_document()}


@router.post("/{post_id}/like")
def like_post(post_id: str, identity: UserIdentity = Depends(current_identity)):
    return _vote(post_id, identity, Polarity.LIKE)


@router.post("/{post_id}/dislike")
def dislike_post(post_id: str, identity: UserIdentity = Depends(current_identity)):
    return _vote(post_id, identity, Polarity.DISLIKE)
