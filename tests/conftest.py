"""
Shared fixtures: an app wired to an in-memory document store, run once per
consistency mode, and helpers to sign users up.

Run:
----
    pytest tests -v
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List

import pytest
from fastapi.testclient import TestClient

from server.app import create_app
from server.config import ServerConfig
from server.services import EngagementService, MemoryDocumentStore
from server.state import AppState, set_state

TEST_SECRET = "test-secret"
CONSISTENCY_MODES = ["transactional", "fast"]


def make_config(**overrides) -> ServerConfig:
    values = dict(
        data_source="memory",
        jwt_secret=TEST_SECRET,
        cookie_secure=False,
        bcrypt_rounds=4,
        log_level="WARNING",
    )
    values.update(overrides)
    return ServerConfig(**values)


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture(params=CONSISTENCY_MODES)
def mode(request) -> str:
    return request.param


@pytest.fixture
def service(store, mode) -> EngagementService:
    return EngagementService(store, mode=mode, clock=lambda: "2025-01-01T00:00:00+00:00")


@pytest.fixture
def config(mode) -> ServerConfig:
    return make_config(consistency_mode=mode)


@pytest.fixture
def state(config, store):
    app_state = AppState(config, store=store)
    yield app_state
    set_state(None)


@pytest.fixture
def client(state):
    app = create_app(state=state)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup(client) -> Callable[..., Dict]:
    """
    Sign a user up and return {"id", "token", "headers", "user"}.
    The session cookie is dropped so each request authenticates only via headers.
    """
    counter = {"n": 0}

    def _signup(first_name: str = "Test", last_name: str = "User", password: str = "secret123") -> Dict:
        counter["n"] += 1
        email = f"{first_name.lower()}.{last_name.lower()}{counter['n']}@example.com"
        response = client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        body = response.json()
        return {
            "id": body["userId"],
            "email": email,
            "password": password,
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
            "user": body,
        }

    return _signup


def seed_user(store: MemoryDocumentStore, user_id: str, **fields) -> Dict:
    doc = {
        "email": f"{user_id}@example.com",
        "firstName": user_id.capitalize(),
        "lastName": "Tester",
        "username": user_id,
        "userImage": "",
        "following": [],
        "followers": [],
    }
    doc.update(fields)
    store.set("users", user_id, doc)
    return doc


def seed_post(store: MemoryDocumentStore, post_id: str, author_id: str = "alice", **fields) -> Dict:
    doc = {
        "content": "hello",
        "userId": author_id,
        "likes": {"likeCount": 0, "likedBy": [], "dislikedBy": []},
        "comments": [],
        "createdAt": "2025-01-01T00:00:00+00:00",
    }
    doc.update(fields)
    store.set("posts", post_id, doc)
    return doc


def seed_comment(store: MemoryDocumentStore, comment_id: str, post_id: str = "p1", author_id: str = "alice") -> Dict:
    doc = {
        "postId": post_id,
        "userId": author_id,
        "text": "nice",
        "votes": {"upvotedBy": [], "downvotedBy": []},
    }
    store.set("comments", comment_id, doc)
    return doc


def run_concurrently(fn: Callable[..., Any], calls: List[tuple]) -> List[Any]:
    """
    Run fn(*args) for every args tuple on its own thread, released together by a
    barrier. Returns each call's result, or the exception it raised.
    """
    barrier = threading.Barrier(len(calls))

    def _call(args):
        barrier.wait(timeout=10)
        try:
            return fn(*args)
        except Exception as e:
            return e

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(_call, calls))
