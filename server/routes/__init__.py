"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .root import router as root_router
from .auth import router as auth_router
from .users import router as users_router
from .posts import router as posts_router
from .comments import router as comments_router
from .bookmarks import router as bookmarks_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(posts_router, prefix="/api/posts", tags=["posts"])
    app.include_router(comments_router, prefix="/api/comments", tags=["comments"])
    app.include_router(bookmarks_router, prefix="/api/bookmarks", tags=["bookmarks"])
