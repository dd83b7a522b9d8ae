# tests/conftest.py
"""Shared fixtures: in-memory MongoDB, memory session store, API client."""

import os

# must be set before blog.core.config is imported
os.environ["SEED_ON_START"] = "false"
os.environ["SESSION_STORE"] = "memory"

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from blog.db.mongo import close_db, set_db
from blog.main import create_app
from blog.middleware.session_store import MemorySessionStore
from blog.services.tag_manager import ensure_indexes


@pytest.fixture
async def mongo_db() -> AsyncGenerator:
    """Fresh mock database wired in as the shared handle."""
    db = AsyncMongoMockClient()["blog_test"]
    set_db(db)
    await ensure_indexes(db)
    yield db
    close_db()


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def api_app(mongo_db, session_store):
    return create_app(session_store=session_store)


@pytest.fixture
async def client(api_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=api_app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def article_payload() -> dict:
    return {
        "title": "hello",
        "tags": ["python", "mongo"],
        "excerpt": "short",
        "content": "long content",
        "category": "notes",
        "createTime": "2024-01-02T03:04:05",
    }
