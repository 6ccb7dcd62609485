"""Signup, login, logout and current user. Sessions are stateless JWTs in an httpOnly cookie."""

import logging

from fastapi import APIRouter, Depends, Response

from engagement.errors import Conflict, InvalidInput, NotFound, Unauthenticated

try:
    from ..dependencies import current_identity
    from ..documents import new_user
    from ..models import LoginRequest, SignupRequest
    from ..services import USERS, UserIdentity
    from ..state import get_state
    from ..utils import now_iso, public_user
except ImportError:
    from dependencies import current_identity
    from documents import new_user
    from models import LoginRequest, SignupRequest
    from services import USERS, UserIdentity
    from state import get_state
    from utils import now_iso, public_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_session(response: Response, user: dict) -> str:
    """Sign a token for user and set it as the session cookie."""
    state = get_state()
    token = state.tokens.issue(
        user["id"],
        email=user.get("email"),
        firstName=user.get("firstName"),
        lastName=user.get("lastName"),
        userImage=user.get("userImage"),
    )
    response.set_cookie(
        key=state.config.cookie_name,
        value=token,
        httponly=True,
        secure=state.config.cookie_secure,
        samesite="strict",
        max_age=state.config.cookie_max_age,
    )
    return token


@router.post("/signup", status_code=201)
def signup(request: SignupRequest, response: Response):
    state = get_state()
    email = request.email.lower()
    if state.store.query(USERS, "email", email):
        raise Conflict("User already exists")

    now = now_iso()
    doc = new_user(
        request.first_name.strip(),
        request.last_name.strip(),
        now,
        email=email,
        password_hash=state.passwords.hash(request.password),
        user_image=state.config.default_user_image,
    )
    user_id = state.store.add(USERS, doc)
    user = {**doc, "id": user_id}
    token = _issue_session(response, user)
    logger.info("[auth] signup user=%s", user_id)
    return {**public_user(user), "token": token}


@router.post("/login")
def login(request: LoginRequest, response: Response):
    state = get_state()
    matches = state.store.query(USERS, "email", request.email.lower())
    if not matches:
        raise InvalidInput("User not found")
    user = matches[0]
    if not state.passwords.verify(request.password, user.get("password", "")):
        raise Unauthenticated("Invalid credentials")
    token = _issue_session(response, user)
    return {**public_user(user), "token": token}


@router.post("/logout")
def logout(response: Response):
    config = get_state().config
    response.delete_cookie(
        key=config.cookie_name,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(identity: UserIdentity = Depends(current_identity)):
    user = get_state().store.get(USERS, identity.uid)
    if user is None:
        raise NotFound("User not found")
    return public_user(user)
