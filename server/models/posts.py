"""Post request models."""

from pydantic import BaseModel, ConfigDict


class PostCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str


class PostUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str
