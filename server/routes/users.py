"""User profiles, suggestions and the follow graph."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from engagement.errors import Conflict, InvalidInput, Unauthorized

try:
    from ..dependencies import current_identity, load_user, optional_identity
    from ..documents import new_user
    from ..models import UserCreateRequest, UserUpdateRequest
    from ..services import USERS, UserIdentity
    from ..state import get_state
    from ..utils import newest_first, now_iso, public_user
except ImportError:
    from dependencies import current_identity, load_user, optional_identity
    from documents import new_user
    from models import UserCreateRequest, UserUpdateRequest
    from services import USERS, UserIdentity
    from state import get_state
    from utils import newest_first, now_iso, public_user

logger = logging.getLogger(__name__)

router = APIRouter()

# update-model field -> stored document field
_PROFILE_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "username": "username",
    "user_image": "userImage",
    "bio": "bio",
    "website": "website",
}


def _viewer_id(identity: Optional[UserIdentity]) -> Optional[str]:
    return identity.uid if identity else None


@router.get("")
def list_users(identity: Optional[UserIdentity] = Depends(optional_identity)):
    users = get_state().store.list(USERS)
    return [public_user(u, _viewer_id(identity)) for u in newest_first(users)]


@router.post("", status_code=201)
def create_user(request: UserCreateRequest, identity: UserIdentity = Depends(current_identity)):
    """
    Create a profile without credentials (accounts with a password come from /api/auth/signup).

    With AUTH_PROVIDER=firebase the profile is the caller's own and is stored
    under their Firebase uid, so later requests resolve to it.
    """
    state = get_state()
    firebase = state.config.auth_provider == "firebase"
    doc = new_user(
        request.first_name.strip(),
        request.last_name.strip(),
        now_iso(),
        email=(request.email or (identity.email if firebase else "") or "").lower(),
        username=request.username.strip(),
        user_image=request.user_image or (identity.user_image if firebase else "") or state.config.default_user_image,
        bio=request.bio,
        website=request.website,
    )
    if firebase:
        if state.store.get(USERS, identity.uid) is not None:
            raise Conflict("User already exists")
        user_id = identity.uid
        state.store.set(USERS, user_id, doc)
    else:
        user_id = state.store.add(USERS, doc)
    logger.info("[users] profile %s created by %s", user_id, identity.uid)
    return public_user({**doc, "id": user_id}, identity.uid)


@router.get("/suggestions")
def suggestions(
    limit: int = Query(5, ge=1, le=50),
    identity: UserIdentity = Depends(current_identity),
):
    """Users the caller does not follow yet (newest first), excluding the caller."""
    store = get_state().store
    me = store.get(USERS, identity.uid) or {}
    following = set(me.get("following") or [])
    candidates = [
        u for u in newest_first(store.list(USERS))
        if u["id"] != identity.uid and u["id"] not in following
    ]
    return [public_user(u, identity.uid) for u in candidates[:limit]]


# Literal paths above; {user_id} below

@router.post("/follow/{follow_user_id}")
def follow_user(follow_user_id: str, identity: UserIdentity = Depends(current_identity)):
    update = get_state().engagement.follow(identity.uid, follow_user_id)
    logger.info("[follow] %s -> %s", identity.uid, follow_user_id)
    return {"message": "User followed successfully", **update.to_response()}


@router.post("/unfollow/{unfollow_user_id}")
def unfollow_user(unfollow_user_id: str, identity: UserIdentity = Depends(current_identity)):
    update = get_state().engagement.unfollow(identity.uid, unfollow_user_id)
    logger.info("[unfollow] %s -> %s", identity.uid, unfollow_user_id)
    return {"message": "User unfollowed successfully", **update.to_response()}


@router.get("/{user_id}")
def get_user(user_id: str, identity: Optional[UserIdentity] = Depends(optional_identity)):
    return public_user(load_user(user_id), _viewer_id(identity))


@router.get("/{user_id}/followers")
def get_followers(user_id: str, identity: Optional[UserIdentity] = Depends(optional_identity)):
    return _profiles(load_user(user_id).get("followers") or [], _viewer_id(identity))


@router.get("/{user_id}/following")
def get_following(user_id: str, identity: Optional[UserIdentity] = Depends(optional_identity)):
    return _profiles(load_user(user_id).get("following") or [], _viewer_id(identity))


def _profiles(user_ids, viewer_id):
    """Profiles for ids, skipping ids whose document no longer exists."""
    store = get_state().store
    out = []
    for uid in user_ids:
        user = store.get(USERS, uid)
        if user is not None:
            out.append(public_user(user, viewer_id))
    return out


@router.put("/{user_id}")
def update_user(
    user_id: str,
    request: UserUpdateRequest,
    identity: UserIdentity = Depends(current_identity),
):
    if user_id != identity.uid:
        raise Unauthorized("You can only update your own profile")
    load_user(user_id)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidInput("No fields to update")
    fields = {_PROFILE_FIELDS[k]: v for k, v in changes.items()}
    fields["updatedAt"] = now_iso()
    store = get_state().store
    store.update(USERS, user_id, fields)
    return public_user(store.get(USERS, user_id), identity.uid)
