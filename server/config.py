"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

DEFAULT_USER_IMAGE = (
    "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcTA_e9lfWk1kqC3XIQD4snZ0OTa_sQKzpLFVQ&s"
)
DEV_JWT_SECRET = "dev-secret-change-me"

DATA_SOURCES = ("memory", "json", "firebase")
AUTH_PROVIDERS = ("jwt", "firebase")


def _bool_env(key: str, default: bool) -> bool:
    v = os.getenv(key)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Data source: "memory" | "json" | "firebase"
    data_source: str = "memory"
    # When data_source=json: file holding every collection
    data_json_path: Optional[Path] = None
    # When data_source=firebase: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Auth
    auth_provider: str = "jwt"
    jwt_secret: str = DEV_JWT_SECRET
    jwt_expire_days: int = 7
    cookie_name: str = "token"
    cookie_secure: bool = True
    bcrypt_rounds: int = 10

    # Engagement writes: "transactional" | "fast"
    consistency_mode: str = "transactional"
    # Expose GET /api/bookmarks (every user's bookmarks)
    bookmarks_admin_view: bool = False

    default_user_image: str = DEFAULT_USER_IMAGE

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_source = os.getenv("DATA_SOURCE", "").strip().lower() or "memory"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3001")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=origins or ["*"],
            data_source=data_source,
            data_json_path=_path_env("DATA_JSON_PATH", base_dir / "data" / "store.json"),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            auth_provider=os.getenv("AUTH_PROVIDER", "jwt").strip().lower() or "jwt",
            jwt_secret=os.getenv("JWT_SECRET") or DEV_JWT_SECRET,
            jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "7")),
            cookie_name=os.getenv("COOKIE_NAME", "token"),
            cookie_secure=_bool_env("COOKIE_SECURE", True),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            consistency_mode=os.getenv("CONSISTENCY_MODE", "transactional").strip().lower() or "transactional",
            bookmarks_admin_view=_bool_env("BOOKMARKS_ADMIN_VIEW", False),
            default_user_image=os.getenv("DEFAULT_USER_IMAGE") or DEFAULT_USER_IMAGE,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.data_source not in DATA_SOURCES:
            errors.append(f"DATA_SOURCE must be one of {DATA_SOURCES}, got {self.data_source!r}")
        if self.data_source == "firebase" and self.firebase_credentials_path:
            if not Path(self.firebase_credentials_path).is_file():
                errors.append(f"Firebase credentials file not found: {self.firebase_credentials_path}")
        if self.auth_provider not in AUTH_PROVIDERS:
            errors.append(f"AUTH_PROVIDER must be one of {AUTH_PROVIDERS}, got {self.auth_provider!r}")
        if self.consistency_mode not in ("transactional", "fast"):
            errors.append(f"CONSISTENCY_MODE must be transactional or fast, got {self.consistency_mode!r}")
        if self.jwt_expire_days <= 0:
            errors.append("JWT_EXPIRE_DAYS must be positive")
        if not 4 <= self.bcrypt_rounds <= 31:
            errors.append("BCRYPT_ROUNDS must be between 4 and 31")

        return len(errors) == 0, errors

    @property
    def using_dev_secret(self) -> bool:
        return self.jwt_secret == DEV_JWT_SECRET

    @property
    def cookie_max_age(self) -> int:
        return self.jwt_expire_days * 24 * 60 * 60


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
