"""
Blog Post API - ObjectId Post Service
=======================================

What:  PostService where MongoDB assigns the identifier.
How:   Documents are inserted without `_id`; the server-side ObjectId is
       read back from the insert result and rendered as 24-character hex.

Behavior:
    - posts also carry `author` and `status`
    - create and update echo the stored post (echo_writes=True)
    - a malformed id is rejected with ValidationError before any query
    - update inserts a new post with the path id when nothing matches,
      unless upsert_on_update is off, in which case a miss is a 404
    - delete answers 204

Upsert flow (single atomic call):
    find_one_and_update(
        {"_id": oid},
        {"$set": {..., "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True, return_document=AFTER,
    )
"""

import logging
from typing import Any, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from blogpost.config import ID_STRATEGY_OBJECTID
from blogpost.exceptions import NotFoundError
from blogpost.models.post import (
    AUTHORED_FIELDS,
    CREATED_AT,
    OBJECT_ID_FIELD,
    mutable_fields,
    new_document,
    parse_object_id,
    replacement,
    utc_now,
)
from blogpost.schemas.post import PostPayload, PostResponse
from blogpost.services.base import PostService

logger = logging.getLogger(__name__)


class ObjectIdPostService(PostService):
    """Posts keyed by MongoDB ObjectIds."""

    id_strategy = ID_STRATEGY_OBJECTID
    id_field = OBJECT_ID_FIELD
    echo_writes = True
    delete_status_code = 204

    def __init__(self, collection: Any, upsert_on_update: bool = True):
        super().__init__(collection)
        self.upsert_on_update = upsert_on_update

    async def create_post(self, payload: PostPayload) -> PostResponse:
        document = new_document(mutable_fields(payload.model_dump(), AUTHORED_FIELDS), utc_now())

        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise self._storage_error("insert", e)

        document[OBJECT_ID_FIELD] = result.inserted_id
        logger.info("Post created: %s", result.inserted_id)
        return self._to_response(document)

    async def get_post(self, post_id: str) -> PostResponse:
        oid = parse_object_id(post_id)

        try:
            document = await self.collection.find_one({OBJECT_ID_FIELD: oid})
        except PyMongoError as e:
            raise self._storage_error("find_one", e, {"post_id": post_id})

        if document is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return self._to_response(document)

    async def list_posts(self) -> List[PostResponse]:
        try:
            documents = await self.collection.find({}).to_list()
        except PyMongoError as e:
            raise self._storage_error("find", e)
        return self._to_responses(documents)

    async def update_post(self, post_id: str, payload: PostPayload) -> Optional[PostResponse]:
        oid = parse_object_id(post_id)
        now = utc_now()
        update = {
            "$set": replacement(mutable_fields(payload.model_dump(), AUTHORED_FIELDS), now),
            "$setOnInsert": {CREATED_AT: now},
        }

        try:
            document = await self.collection.find_one_and_update(
                {OBJECT_ID_FIELD: oid},
                update,
                upsert=self.upsert_on_update,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._storage_error("find_one_and_update", e, {"post_id": post_id})

        if document is None:
            raise NotFoundError(resource="post", resource_id=post_id)

        if document.get(CREATED_AT) == now:
            logger.info("Post %s not found on update; inserted", post_id)
        else:
            logger.info("Post %s updated", post_id)
        return self._to_response(document)

    async def delete_post(self, post_id: str) -> None:
        oid = parse_object_id(post_id)

        try:
            result = await self.collection.delete_one({OBJECT_ID_FIELD: oid})
        except PyMongoError as e:
            raise self._storage_error("delete_one", e, {"post_id": post_id})

        logger.info("Post %s deleted: removed=%d", post_id, result.deleted_count)
