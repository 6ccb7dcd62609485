"""Bookmark record stored in a user's bookmark document (``bookmarks/{userId}.posts``)."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class BookmarkRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    post_id: str
    bookmarked_at: str
    bookmarked_by: str

    @field_validator("bookmarked_at", mode="before")
    @classmethod
    def _timestamp_to_iso(cls, value: Any) -> Any:
        # Firestore Timestamps come back from firebase-admin as datetimes
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def ensure_records(items: Optional[List[Dict[str, Any]]]) -> List[BookmarkRecord]:
    """Convert stored bookmark dicts to records; tolerates a missing list."""
    return [
        BookmarkRecord.model_validate(item) if isinstance(item, dict) else item
        for item in (items or [])
    ]
