"""Backing logic: stores, identity, passwords and the engagement service."""

from .document_store import (
    BOOKMARKS,
    COMMENTS,
    DELETE_FIELD,
    POSTS,
    USERS,
    ArrayRemove,
    ArrayUnion,
    DocumentStore,
    Increment,
    JsonDocumentStore,
    MemoryDocumentStore,
    StoreError,
    Transaction,
)
from .engagement_service import CONSISTENCY_MODES, EngagementService
from .firestore_document_store import FirestoreDocumentStore
from .identity import (
    FirebaseTokenVerifier,
    IdentityResolver,
    TokenCodec,
    UserIdentity,
    extract_credential,
)
from .passwords import PasswordHasher

__all__ = [
    "ArrayRemove",
    "ArrayUnion",
    "BOOKMARKS",
    "COMMENTS",
    "CONSISTENCY_MODES",
    "DELETE_FIELD",
    "DocumentStore",
    "EngagementService",
    "FirebaseTokenVerifier",
    "FirestoreDocumentStore",
    "IdentityResolver",
    "Increment",
    "JsonDocumentStore",
    "MemoryDocumentStore",
    "POSTS",
    "PasswordHasher",
    "StoreError",
    "TokenCodec",
    "Transaction",
    "USERS",
    "UserIdentity",
    "extract_credential",
]
