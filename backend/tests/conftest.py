"""
Blog Post API - Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_collection:     AsyncMock collection for service unit tests
    ├── fake_collection:     in-memory async collection for HTTP round trips
    ├── uuid_client:         HTTPX AsyncClient, uuid id strategy
    ├── objectid_client:     HTTPX AsyncClient, objectid id strategy
    └── make_client:         builds a client for any Settings/collection pair
"""

import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Mapping, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["MONGODB_URI"] = "mongodb://localhost:1"
os.environ["MONGODB_CONNECT_ATTEMPTS"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

from blogpost.config import Settings  # noqa: E402
from blogpost.database import PostStorage  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory collection double
# ══════════════════════════════════════════════════════════════════════════

class _FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """
    Stand-in for a pymongo AsyncCollection covering the calls the services make.

    Filters are single-key equality matches; updates understand $set and
    $setOnInsert. Stored and returned documents are deep copies, so tests
    observe what a real round trip through MongoDB would give them.
    """

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []

    @staticmethod
    def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
        return all(document.get(key) == value for key, value in query.items())

    def _first(self, query: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if self._matches(document, query):
                return document
        return None

    async def insert_one(self, document: Dict[str, Any]):
        # The driver adds `_id` to the caller's dict
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def find_one(self, query: Mapping[str, Any]):
        document = self._first(query)
        return copy.deepcopy(document) if document is not None else None

    def find(self, query: Mapping[str, Any]):
        return _FakeCursor(
            [copy.deepcopy(d) for d in self.documents if self._matches(d, query)]
        )

    async def update_one(self, query: Mapping[str, Any], update: Mapping[str, Any]):
        document = self._first(query)
        if document is None:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        document.update(update.get("$set", {}))
        return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)

    async def find_one_and_update(
        self,
        query: Mapping[str, Any],
        update: Mapping[str, Any],
        upsert: bool = False,
        return_document: Any = None,
    ):
        document = self._first(query)
        if document is None:
            if not upsert:
                return None
            document = dict(query)
            document.setdefault("_id", ObjectId())
            document.update(update.get("$setOnInsert", {}))
            self.documents.append(document)
        document.update(update.get("$set", {}))
        return copy.deepcopy(document)

    async def delete_one(self, query: Mapping[str, Any]):
        document = self._first(query)
        if document is None:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(document)
        return SimpleNamespace(deleted_count=1)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_collection():
    """
    Provides a mock async collection.

    Usage:
        async def test_get(mock_collection):
            mock_collection.find_one.return_value = {...}
            result = await UuidPostService(mock_collection).get_post("abc")
    """
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.find.return_value.to_list = AsyncMock(return_value=[])
    return collection


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def make_client():
    """
    Factory for HTTPX AsyncClients bound to a fresh app.

    Usage:
        async with make_client(Settings(post_id_strategy="objectid"), collection) as client:
            response = await client.get("/posts")
    """
    from blogpost.main import create_app

    def _make(
        config: Settings,
        collection: Any,
        client: Any = None,
        raise_app_exceptions: bool = True,
    ) -> AsyncClient:
        app = create_app(config, storage=PostStorage(collection=collection, client=client))
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return AsyncClient(transport=transport, base_url="http://test")

    return _make


@pytest_asyncio.fixture
async def uuid_client(make_client, fake_collection):
    async with make_client(Settings(post_id_strategy="uuid"), fake_collection) as client:
        yield client


@pytest_asyncio.fixture
async def objectid_client(make_client, fake_collection):
    async with make_client(Settings(post_id_strategy="objectid"), fake_collection) as client:
        yield client


@pytest.fixture
def sample_post():
    return {"title": "t", "content": "c"}
