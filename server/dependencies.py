"""FastAPI dependencies: resolve the caller's identity from bearer token or cookie."""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from engagement.errors import NotFound, Unauthorized

try:
    from .services import USERS, UserIdentity, extract_credential
    from .state import get_state
except ImportError:
    from services import USERS, UserIdentity, extract_credential
    from state import get_state

bearer = HTTPBearer(auto_error=False)


def _credential(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    state = get_state()
    header = f"Bearer {credentials.credentials}" if credentials else None
    return extract_credential(header, request.cookies.get(state.config.cookie_name))


def current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> UserIdentity:
    """Protected routes: Unauthenticated when the credential is missing or invalid."""
    return get_state().identity_resolver.resolve(_credential(request, credentials))


def optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[UserIdentity]:
    """Public routes that personalize when a credential is present (an invalid one still fails)."""
    token = _credential(request, credentials)
    if token is None:
        return None
    return get_state().identity_resolver.resolve(token)


def load_document(collection: str, doc_id: str, label: str) -> Dict[str, Any]:
    doc = get_state().store.get(collection, doc_id)
    if doc is None:
        raise NotFound(f"{label} not found")
    return doc


def load_user(user_id: str) -> Dict[str, Any]:
    return load_document(USERS, user_id, "User")


def require_owner(doc: Dict[str, Any], identity: UserIdentity, message: str) -> None:
    """Ownership is checked against the document's userId field."""
    if doc.get("userId") != identity.uid:
        raise Unauthorized(message)


def load_author(identity: UserIdentity) -> Dict[str, Any]:
    """Author fields for new posts/comments: the stored profile, else the token's claims."""
    user = get_state().store.get(USERS, identity.uid)
    if user is not None:
        return user
    return {
        "id": identity.uid,
        "username": identity.email.split("@")[0] if identity.email else "",
        "firstName": identity.first_name,
        "lastName": identity.last_name,
        "userImage": identity.user_image,
    }
