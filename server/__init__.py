"""
Social Engagement API server

Usage: uvicorn server:app --reload --port 3001
"""

from .app import app, create_app
from .config import ServerConfig, get_config, reload_config
from .services import (
    DocumentStore,
    EngagementService,
    FirestoreDocumentStore,
    IdentityResolver,
    JsonDocumentStore,
    MemoryDocumentStore,
)
from .state import AppState, get_state, set_state

__all__ = [
    "app",
    "create_app",
    "AppState",
    "ServerConfig",
    "get_config",
    "get_state",
    "reload_config",
    "set_state",
    "DocumentStore",
    "EngagementService",
    "FirestoreDocumentStore",
    "IdentityResolver",
    "JsonDocumentStore",
    "MemoryDocumentStore",
]
