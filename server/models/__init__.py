"""Pydantic request models for the API."""

from .auth import LoginRequest, SignupRequest
from .comments import CommentCreateRequest, CommentUpdateRequest
from .posts import PostCreateRequest, PostUpdateRequest
from .users import UserCreateRequest, UserUpdateRequest

__all__ = [
    "CommentCreateRequest",
    "CommentUpdateRequest",
    "LoginRequest",
    "PostCreateRequest",
    "PostUpdateRequest",
    "SignupRequest",
    "UserCreateRequest",
    "UserUpdateRequest",
]
