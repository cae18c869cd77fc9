"""
Blog Post API - UUID Post Service Unit Tests
==============================================

What:  Tests for UuidPostService against a mocked collection.
How:   AsyncMock collection (no MongoDB needed); assertions on the exact
       documents and filters the service hands to the driver.

What we test:
    ✅ Create issues a UUID and equal timestamps
    ✅ Get by id, and NotFoundError on a miss
    ✅ Update sets mutable fields + updatedAt only, never inserts
    ✅ Delete of a missing id succeeds
    ✅ Driver errors surface as DatabaseError with the driver text
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from blogpost.exceptions import DatabaseError, NotFoundError
from blogpost.schemas.post import PostPayload
from blogpost.services.uuid_posts import UuidPostService


def _stored(post_id="6a1f0c9e-1111-4222-8333-444455556666", **overrides):
    now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    document = {
        "id": post_id,
        "title": "t",
        "content": "c",
        "createdAt": now,
        "updatedAt": now,
    }
    document.update(overrides)
    return document


class TestUuidCreate:

    def setup_method(self):
        self.payload = PostPayload(title="t", content="c")

    @pytest.mark.asyncio
    async def test_create_assigns_uuid_and_timestamps(self, mock_collection):
        service = UuidPostService(mock_collection)

        result = await service.create_post(self.payload)

        mock_collection.insert_one.assert_awaited_once()
        inserted = mock_collection.insert_one.await_args.args[0]
        assert str(uuid.UUID(inserted["id"])) == inserted["id"]
        assert inserted["createdAt"] == inserted["updatedAt"]
        assert result.id == inserted["id"]
        assert result.title == "t"
        assert result.author is None

    @pytest.mark.asyncio
    async def test_create_ignores_author_and_status(self, mock_collection):
        service = UuidPostService(mock_collection)

        await service.create_post(PostPayload(title="t", author="a", status="draft"))

        inserted = mock_collection.insert_one.await_args.args[0]
        assert "author" not in inserted
        assert "status" not in inserted
        assert inserted["content"] == ""

    @pytest.mark.asyncio
    async def test_create_storage_failure(self, mock_collection):
        mock_collection.insert_one.side_effect = ServerSelectionTimeoutError("connection refused")

        with pytest.raises(DatabaseError, match="connection refused") as exc:
            await UuidPostService(mock_collection).create_post(self.payload)
        assert exc.value.context["operation"] == "insert"


class TestUuidGet:

    @pytest.mark.asyncio
    async def test_get_found(self, mock_collection):
        mock_collection.find_one.return_value = _stored(post_id="abc")

        result = await UuidPostService(mock_collection).get_post("abc")

        mock_collection.find_one.assert_awaited_once_with({"id": "abc"})
        assert result.id == "abc"
        assert result.created_at == result.updated_at

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_collection):
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundError, match="abc"):
            await UuidPostService(mock_collection).get_post("abc")


class TestUuidList:

    @pytest.mark.asyncio
    async def test_list_returns_every_document(self, mock_collection):
        mock_collection.find.return_value.to_list.return_value = [
            _stored(post_id=str(i)) for i in range(3)
        ]

        result = await UuidPostService(mock_collection).list_posts()

        mock_collection.find.assert_called_once_with({})
        assert [post.id for post in result] == ["0", "1", "2"]

    @pytest.mark.asyncio
    async def test_list_aborts_on_undecodable_document(self, mock_collection):
        """One broken document fails the whole listing."""
        broken = _stored(post_id="2")
        del broken["createdAt"]
        mock_collection.find.return_value.to_list.return_value = [_stored(post_id="1"), broken]

        with pytest.raises(DatabaseError) as exc:
            await UuidPostService(mock_collection).list_posts()
        assert exc.value.context["operation"] == "decode"


class TestUuidUpdate:

    @pytest.mark.asyncio
    async def test_update_replaces_mutable_fields(self, mock_collection):
        mock_collection.update_one.return_value = SimpleNamespace(matched_count=1)

        result = await UuidPostService(mock_collection).update_post(
            "abc", PostPayload(title="new")
        )

        assert result is None
        query, update = mock_collection.update_one.await_args.args
        assert query == {"id": "abc"}
        changes = update["$set"]
        assert changes["title"] == "new"
        assert changes["content"] == ""
        assert "createdAt" not in changes
        assert "id" not in changes
        assert mock_collection.update_one.await_args.kwargs.get("upsert") is None

    @pytest.mark.asyncio
    async def test_update_miss_is_not_an_error(self, mock_collection):
        mock_collection.update_one.return_value = SimpleNamespace(matched_count=0)

        assert await UuidPostService(mock_collection).update_post("gone", PostPayload()) is None
        mock_collection.insert_one.assert_not_awaited()


class TestUuidDelete:

    @pytest.mark.asyncio
    async def test_delete_missing_id_succeeds(self, mock_collection):
        mock_collection.delete_one.return_value = SimpleNamespace(deleted_count=0)

        await UuidPostService(mock_collection).delete_post("gone")

        mock_collection.delete_one.assert_awaited_once_with({"id": "gone"})
