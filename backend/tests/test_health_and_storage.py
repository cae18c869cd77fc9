"""
Blog Post API - Health Check and Storage Lifecycle Tests
==========================================================

What we test:
    ✅ /health answers 200 when MongoDB pings, 503 when it does not
    ✅ connect_storage retries the startup ping, then gives up
    ✅ close_storage only closes clients it owns
    ✅ Settings validation of the id strategy and log level
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError as SettingsValidationError
from pymongo.errors import ServerSelectionTimeoutError

from blogpost.config import Settings
from blogpost.database import PostStorage, close_storage, connect_storage
from blogpost.exceptions import StorageUnavailableError


def _client(ping_side_effect=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_side_effect)
    client.close = AsyncMock()
    return client


class TestHealthRoute:

    @pytest.mark.asyncio
    async def test_healthy(self, make_client, fake_collection):
        mongo = _client()
        async with make_client(Settings(post_id_strategy="objectid"), fake_collection, mongo) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["id_strategy"] == "objectid"
        mongo.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_unhealthy_when_ping_fails(self, make_client, fake_collection):
        mongo = _client(ServerSelectionTimeoutError("no servers"))
        async with make_client(Settings(), fake_collection, mongo) as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestConnectStorage:

    @pytest.mark.asyncio
    async def test_connect_returns_collection_handle(self):
        mongo = _client()
        config = Settings(mongodb_database="blog", mongodb_collection="posts")

        with patch("blogpost.database.AsyncMongoClient", return_value=mongo) as factory:
            storage = await connect_storage(config)

        assert storage.client is mongo
        assert factory.call_args.kwargs["tz_aware"] is True
        mongo.__getitem__.assert_called_once_with("blog")
        mongo.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_connect_retries_ping(self):
        mongo = _client([ServerSelectionTimeoutError("not yet"), {"ok": 1}])
        config = Settings(mongodb_connect_attempts=2, mongodb_connect_min_wait=1, mongodb_connect_max_wait=1)

        with patch("blogpost.database.AsyncMongoClient", return_value=mongo):
            await connect_storage(config)

        assert mongo.admin.command.await_count == 2
        mongo.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connect_gives_up(self):
        mongo = _client(ServerSelectionTimeoutError("connection refused"))
        config = Settings(mongodb_connect_attempts=1)

        with patch("blogpost.database.AsyncMongoClient", return_value=mongo):
            with pytest.raises(StorageUnavailableError) as exc:
                await connect_storage(config)

        assert exc.value.attempts == 1
        mongo.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_storage(self):
        mongo = _client()
        await close_storage(PostStorage(collection=MagicMock(), client=mongo))
        mongo.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_storage_without_client(self):
        await close_storage(PostStorage(collection=MagicMock()))
        await close_storage(None)


class TestSettings:

    def test_defaults(self):
        config = Settings()
        assert config.mongodb_database == "blog"
        assert config.mongodb_collection == "posts"
        assert config.post_id_strategy == "uuid"
        assert config.post_upsert_on_update is True

    def test_id_strategy_normalized(self):
        assert Settings(post_id_strategy=" ObjectId ").post_id_strategy == "objectid"

    def test_id_strategy_rejected(self):
        with pytest.raises(SettingsValidationError):
            Settings(post_id_strategy="serial")

    def test_log_level_rejected(self):
        with pytest.raises(SettingsValidationError):
            Settings(log_level="LOUD")

    def test_cors_origins_list(self):
        assert Settings(cors_origins="http://a, http://b").cors_origins_list == ["http://a", "http://b"]
