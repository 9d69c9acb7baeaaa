"""
Shared test fixtures.

Key fixtures:
- app / client: a Flask app built with the testing config on in-memory SQLite
- authority: a TokenAuthority over an in-memory account store (no database)
- make_account: factory for unsaved User objects held by that store
- make_token: factory for arbitrary JWTs, for forged/expired token cases
- register: helper that registers a user through the API and returns the JSON body
"""

import datetime

import jwt
import pytest

from api import create_app
from api.config import TestingConfig
from models import storage
from models.user import User
from utils.security import TokenAuthority

ACCESS_SECRET = TestingConfig.JWT_ACCESS_SECRET
REFRESH_SECRET = TestingConfig.JWT_REFRESH_SECRET
API = "/api/v1"


class MemoryUserStore:
    """Dict-backed account store with the two operations the authority uses."""

    def __init__(self):
        self.users = {}
        self.saves = 0

    def add(self, user):
        self.users[user.id] = user
        return user

    def find_by_identifier(self, user_id):
        return self.users.get(user_id)

    def save(self, user):
        self.saves += 1
        self.users[user.id] = user


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def memory_store():
    return MemoryUserStore()


@pytest.fixture
def authority(memory_store):
    return TokenAuthority(
        memory_store,
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_expires=datetime.timedelta(minutes=15),
        refresh_expires=datetime.timedelta(days=7),
    )


@pytest.fixture
def make_account(memory_store):
    counter = {"n": 0}

    def _make_account(email: str | None = None, username: str = "tester") -> User:
        counter["n"] += 1
        user = User(
            username=username,
            email=email or f"user{counter['n']}@example.com",
            password_hash="unused",
        )
        return memory_store.add(user)

    return _make_account


@pytest.fixture
def make_token():
    """Factory for JWTs with arbitrary claims, secret and expiry."""

    def _make_token(
        sub: str = "someone",
        secret: str = REFRESH_SECRET,
        token_type: str | None = "refresh",
        exp_minutes: float = 10.0,
        issuer: str = "tool-directory-api",
        extra_claims: dict | None = None,
    ) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "sub": sub,
            "iss": issuer,
            "iat": now,
            "exp": now + datetime.timedelta(minutes=exp_minutes),
        }
        if token_type is not None:
            payload["type"] = token_type
        if extra_claims:
            payload.update(extra_claims)
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make_token


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(email="alice@example.com", password="correct-horse", username="alice"):
        resp = client.post(
            f"{API}/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _register


@pytest.fixture
def auth_header():
    def _auth_header(access_token: str) -> dict:
        return {"Authorization": f"Bearer {access_token}"}

    return _auth_header
