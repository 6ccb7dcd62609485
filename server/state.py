"""Application state: config, document store, auth helpers and engagement service."""

import logging
from pathlib import Path
from typing import Optional

try:
    from .config import get_config, ServerConfig
    from .services import (
        DocumentStore,
        EngagementService,
        FirestoreDocumentStore,
        IdentityResolver,
        JsonDocumentStore,
        MemoryDocumentStore,
        PasswordHasher,
        TokenCodec,
    )
except ImportError:
    from config import get_config, ServerConfig
    from services import (
        DocumentStore,
        EngagementService,
        FirestoreDocumentStore,
        IdentityResolver,
        JsonDocumentStore,
        MemoryDocumentStore,
        PasswordHasher,
        TokenCodec,
    )

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig, store: Optional[DocumentStore] = None):
        self.config = config

        # Set when DATA_SOURCE=firebase could not be honoured and data lives in memory
        self.store_fallback = False
        # Document store: injected (tests) or chosen by DATA_SOURCE
        self.store = store if store is not None else self._create_store(config)
        logger.info("[startup] Document store: %s", type(self.store).__name__)

        self.passwords = PasswordHasher(rounds=config.bcrypt_rounds)
        self.tokens = TokenCodec(config.jwt_secret, expire_days=config.jwt_expire_days)
        self.identity_resolver = IdentityResolver(self.tokens, self.store, provider=config.auth_provider)
        self.engagement = EngagementService(self.store, mode=config.consistency_mode)
        logger.info(
            "[startup] Auth provider: %s, consistency mode: %s",
            config.auth_provider,
            config.consistency_mode,
        )
        if config.using_dev_secret:
            logger.warning("[startup] JWT_SECRET not set; using the development secret")

    def _create_store(self, config: ServerConfig) -> DocumentStore:
        """Create the document store (Firestore when configured, else JSON file or memory)."""
        if config.data_source == "firebase":
            cred_path = Path(config.firebase_credentials_path) if config.firebase_credentials_path else None
            if cred_path is not None and not cred_path.is_file():
                logger.warning(
                    "[startup] Firestore store skipped: credentials path not found or not a file: %s",
                    cred_path,
                )
            else:
                try:
                    return FirestoreDocumentStore(
                        project_id=config.firebase_project_id,
                        credentials_path=config.firebase_credentials_path,
                    )
                except Exception as e:
                    logger.warning("[startup] Firestore store init failed: %s, using in-memory store", e)
            logger.warning("[startup] DATA_SOURCE=firebase but writes go to memory and are lost on restart")
            self.store_fallback = True
            return MemoryDocumentStore()
        if config.data_source == "json" and config.data_json_path:
            return JsonDocumentStore(config.data_json_path)
        return MemoryDocumentStore()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (None forces a rebuild from config on next access)."""
    global _state
    _state = state
