"""Pure helpers: timestamps, response shaping, ordering."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

# Fields never returned to clients
PRIVATE_USER_FIELDS = ("password",)


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string (stored on every document)."""
    return datetime.now(timezone.utc).isoformat()


def public_user(user: Dict[str, Any], viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    User document as returned by the API: password removed, id also exposed
    as userId. When viewer_id is given, isFollowed says whether the viewer
    follows this user.
    """
    out = {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}
    if "id" in out:
        out["userId"] = out["id"]
    out.setdefault("following", [])
    out.setdefault("followers", [])
    if viewer_id is not None:
        out["isFollowed"] = viewer_id in out["followers"]
    return out


def newest_first(docs: Iterable[Dict[str, Any]], key: str = "createdAt") -> List[Dict[str, Any]]:
    return sorted(docs, key=lambda d: d.get(key) or "", reverse=True)


def oldest_first(docs: Iterable[Dict[str, Any]], key: str = "createdAt") -> List[Dict[str, Any]]:
    return sorted(docs, key=lambda d: d.get(key) or "")
