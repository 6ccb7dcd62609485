"""Comment request models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CommentCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    post_id: str
    text: str


class CommentUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
