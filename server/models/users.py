"""Request models for user profiles. Updates accept only the listed fields."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserCreateRequest(BaseModel):
    """Profile without credentials (POST /api/users)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    user_image: str = ""
    bio: str = ""
    website: str = ""


class UserUpdateRequest(BaseModel):
    """PUT /api/users/{id}. Unknown fields are rejected, not merged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    username: Optional[str] = Field(None, min_length=1)
    user_image: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
