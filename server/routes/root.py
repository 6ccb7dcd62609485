"""Root and health endpoints."""

from typing import Tuple

from fastapi import APIRouter

try:
    from ..services import USERS
    from ..state import get_state
except ImportError:
    from services import USERS
    from state import get_state

router = APIRouter()


def _store_available(state) -> Tuple[bool, str]:
    """Return (available, message) for the document store."""
    try:
        state.store.get(USERS, "__health__")
        return True, "connected"
    except Exception as e:
        return False, str(e)


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Social Engagement API",
        "version": "1.0.0",
        "status": "ok",
        "store": type(state.store).__name__,
        "consistency_mode": state.engagement.mode,
        "endpoints": {
            "auth": ["/api/auth/signup", "/api/auth/login", "/api/auth/logout", "/api/auth/me"],
            "users": ["/api/users", "/api/users/suggestions", "/api/users/follow/{id}", "/api/users/unfollow/{id}"],
            "posts": ["/api/posts", "/api/posts/{id}/like", "/api/posts/{id}/dislike"],
            "comments": ["/api/comments", "/api/comments/{id}/upvote", "/api/comments/{id}/downvote"],
            "bookmarks": ["/api/bookmarks/{userId}", "/api/bookmarks/{userId}/{postId}"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    store_ok, store_msg = _store_available(state)
    # a memory fallback for DATA_SOURCE=firebase answers reads but does not persist
    fallback = state.store_fallback
    return {
        "status": "healthy" if store_ok and not fallback else "degraded",
        "store": {
            "available": store_ok,
            "message": store_msg,
            "type": type(state.store).__name__,
            "dataSource": state.config.data_source,
            "fallback": fallback,
        },
    }
