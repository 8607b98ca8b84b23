"""
Shared fixtures.

Every test gets a fresh in-memory store. Async tests seed it with the
`make_user` / `make_category` factories; sync API tests use the `seed_*`
variants, which drive the same factories through asyncio.run.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from inkpress.api.app import create_app
from inkpress.auth import AuthContext, TokenService, hash_password
from inkpress.config import Settings
from inkpress.core.models import Category, Role, User
from inkpress.services import PostLifecycle, PostQueryBuilder
from inkpress.storage import Collections, InMemoryDocumentStore

TEST_SECRET = "test-secret"
PASSWORD = "password123"

# Hashing is deliberately slow; hash the shared test password once.
_PASSWORD_HASH = hash_password(PASSWORD)


async def _insert_user(store, username, role=Role.USER, is_active=True) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        role=role,
        is_active=is_active,
        password_hash=_PASSWORD_HASH,
    )
    await store.insert(Collections.USERS, user.id, user.model_dump())
    return user


async def _insert_category(store, name="Tech") -> Category:
    category = Category(name=name)
    await store.insert(Collections.CATEGORIES, category.id, category.model_dump())
    return category


def ctx_for(user: User) -> AuthContext:
    return AuthContext.of(user.to_identity())


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        jwt_secret_key=TEST_SECRET,
        sentry_dsn="",
        admin_username="",
        admin_email="",
        admin_password="",
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def lifecycle(store):
    return PostLifecycle(store)


@pytest.fixture
def builder():
    return PostQueryBuilder()


# =============================================================================
# Seeding
# =============================================================================


@pytest.fixture
def make_user(store):
    async def factory(username, role=Role.USER, is_active=True):
        return await _insert_user(store, username, role=role, is_active=is_active)
    return factory


@pytest.fixture
def make_category(store):
    async def factory(name="Tech"):
        return await _insert_category(store, name)
    return factory


@pytest.fixture
def seed_user(store):
    def factory(username, role=Role.USER, is_active=True):
        return asyncio.run(_insert_user(store, username, role=role, is_active=is_active))
    return factory


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def client(settings, store):
    return TestClient(create_app(settings, store))


@pytest.fixture
def auth_header(tokens):
    def header(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {tokens.issue(user.to_identity())}"}
    return header
