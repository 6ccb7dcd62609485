"""
Identity Resolver: inbound credential -> verified UserIdentity.

Two token providers:
- jwt (default): HS256 session tokens issued at signup/login, 7-day expiry.
- firebase: Firebase ID tokens verified with firebase-admin auth.

Resolving has no side effects; it only reads the user document (jwt) or the
identity provider (firebase) to fill in display fields the token lacks.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt  # PyJWT

from engagement.errors import Unauthenticated

from .document_store import USERS, DocumentStore

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass
class UserIdentity:
    uid: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    user_image: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "uid": self.uid,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "userImage": self.user_image,
        }


class TokenCodec:
    """Issue and verify signed session tokens."""

    def __init__(self, secret: str, expire_days: int = 7, algorithm: str = JWT_ALGORITHM):
        if not secret:
            raise ValueError("JWT secret cannot be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expire_days = expire_days

    def issue(self, user_id: str, **claims: Any) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **{k: v for k, v in claims.items() if v is not None},
            "userId": user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=self.expire_days)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired", status_code=403)
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid or expired token", status_code=403)
        if not claims.get("userId"):
            raise Unauthenticated("Invalid or expired token", status_code=403)
        return claims


class FirebaseTokenVerifier:
    """Verify Firebase ID tokens; enrich name/photo from the auth user record when missing."""

    def verify(self, token: str) -> UserIdentity:
        from firebase_admin import auth

        try:
            decoded = auth.verify_id_token(token)
        except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError) as e:
            raise Unauthenticated(f"Unauthorized: Invalid token ({e})", status_code=403)

        name = decoded.get("name") or ""
        picture = decoded.get("picture") or ""
        if not name or not picture:
            try:
                record = auth.get_user(decoded["uid"])
                name = name or record.display_name or ""
                picture = picture or record.photo_url or ""
            except auth.UserNotFoundError:
                logger.warning("[auth] Firebase user %s not found for profile lookup", decoded["uid"])
        parts = name.split(" ")
        return UserIdentity(
            uid=decoded["uid"],
            email=decoded.get("email") or "",
            first_name=parts[0] if parts[0] else "User",
            last_name=parts[1] if len(parts) > 1 else "",
            user_image=picture,
        )


def extract_credential(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    if cookie_token and cookie_token.strip():
        return cookie_token.strip()
    return None


class IdentityResolver:
    """resolve(credential) -> UserIdentity, raising Unauthenticated on failure."""

    def __init__(
        self,
        codec: TokenCodec,
        store: DocumentStore,
        provider: str = "jwt",
        firebase_verifier: Optional[FirebaseTokenVerifier] = None,
    ):
        if provider not in ("jwt", "firebase"):
            raise ValueError(f"Unknown auth provider: {provider!r}")
        self._codec = codec
        self._store = store
        self._provider = provider
        self._firebase = firebase_verifier or (FirebaseTokenVerifier() if provider == "firebase" else None)

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    def resolve(self, credential: Optional[str]) -> UserIdentity:
        if not credential:
            raise Unauthenticated("Unauthorized: No token provided")
        if self._provider == "firebase":
            return self._firebase.verify(credential)

        claims = self._codec.decode(credential)
        identity = UserIdentity(
            uid=claims["userId"],
            email=claims.get("email") or "",
            first_name=claims.get("firstName") or "",
            last_name=claims.get("lastName") or "",
            user_image=claims.get("userImage") or "",
        )
        if identity.first_name and identity.email:
            return identity

        # userId-only token: take display fields from the stored profile
        user = self._store.get(USERS, identity.uid)
        if user:
            identity.email = identity.email or user.get("email", "")
            identity.first_name = identity.first_name or user.get("firstName", "")
            identity.last_name = identity.last_name or user.get("lastName", "")
            identity.user_image = identity.user_image or user.get("userImage", "")
        return identity
