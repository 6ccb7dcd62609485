"""Comments: CRUD (owner-gated edits) and up/down vote toggles."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from engagement import Polarity
from engagement.errors import InvalidInput

try:
    from ..dependencies import current_identity, load_author, load_document, require_owner
    from ..documents import new_comment
    from ..models import CommentCreateRequest, CommentUpdateRequest
    from ..services import COMMENTS, POSTS, ArrayRemove, ArrayUnion, UserIdentity
    from ..state import get_state
    from ..utils import now_iso, oldest_first
except ImportError:
    from dependencies import current_identity, load_author, load_document, require_owner
    from documents import new_comment
    from models import CommentCreateRequest, CommentUpdateRequest
    from services import COMMENTS, POSTS, ArrayRemove, ArrayUnion, UserIdentity
    from state import get_state
    from utils import now_iso, oldest_first

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_comment(comment_id: str) -> dict:
    return load_document(COMMENTS, comment_id, "Comment")


def _require_text(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise InvalidInput("Comment text is required")
    return text


@router.get("")
def list_comments(post_id: Optional[str] = Query(None, alias="postId")):
    store = get_state().store
    comments = store.query(COMMENTS, "postId", post_id) if post_id else store.list(COMMENTS)
    return oldest_first(comments)


@router.get("/post/{post_id}")
def comments_for_post(post_id: str):
    return oldest_first(get_state().store.query(COMMENTS, "postId", post_id))


@router.post("", status_code=201)
def create_comment(request: CommentCreateRequest, identity: UserIdentity = Depends(current_identity)):
    text = _require_text(request.text)
    load_document(POSTS, request.post_id, "Post")
    store = get_state().store
    doc = new_comment(load_author(identity), request.post_id, text, now_iso())
    comment_id = store.add(COMMENTS, doc)
    store.update(POSTS, request.post_id, {"comments": ArrayUnion([comment_id])})
    logger.info("[comments] %s on post %s by %s", comment_id, request.post_id, identity.uid)
    return {**doc, "id": comment_id}


@router.get("/{comment_id}")
def get_comment(comment_id: str):
    return _load_comment(comment_id)


@router.put("/{comment_id}")
def update_comment(
    comment_id: str,
    request: CommentUpdateRequest,
    identity: UserIdentity = Depends(current_identity),
):
    comment = _load_comment(comment_id)
    require_owner(comment, identity, "You can only edit your own comments")
    store = get_state().store
    store.update(COMMENTS, comment_id, {"text": _require_text(request.text), "updatedAt": now_iso()})
    return store.get(COMMENTS, comment_id)


@router.delete("/{comment_id}")
def delete_comment(comment_id: str, identity: UserIdentity = Depends(current_identity)):
    comment = _load_comment(comment_id)
    require_owner(comment, identity, "You can only delete your own comments")
    store = get_state().store
    store.delete(COMMENTS, comment_id)
    post_id = comment.get("postId")
    if post_id and store.get(POSTS, post_id) is not None:
        store.update(POSTS, post_id, {"comments": ArrayRemove([comment_id])})
    return {"message": "Comment deleted successfully"}


def _vote(comment_id: str, identity: UserIdentity, polarity: Polarity) -> dict:
    outcome = get_state().engagement.toggle_comment_vote(comment_id, identity.uid, polarity)
    return {"message": outcome.message, "votes": outcome.state.to_document()}


@router.post("/{comment_id}/upvote")
def upvote_comment(comment_id: str, identity: UserIdentity = Depends(current_identity)):
    return _vote(comment_id, identity, Polarity.UPVOTE)


@router.post("/{comment_id}/downvote")
def downvote_comment(comment_id: str, identity: UserIdentity = Depends(current_identity)):
    return _vote(comment_id, identity, Polarity.DOWNVOTE)
