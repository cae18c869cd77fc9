"""
Blog Post API - UUID Post Service
===================================

What:  PostService where the service issues the identifier.
How:   A UUID4 string is generated at create time and stored in the `id`
       field next to MongoDB's own `_id`, which is never exposed.

Behavior:
    - create answers with an empty body (echo_writes=False)
    - update never inserts; a PUT that matches nothing still succeeds
    - delete answers 200
    - no duplicate-id check before insert
"""

import logging
from typing import List, Optional

from pymongo.errors import PyMongoError

from blogpost.config import ID_STRATEGY_UUID
from blogpost.exceptions import NotFoundError
from blogpost.models.post import (
    BASE_FIELDS,
    ID_FIELD,
    mutable_fields,
    new_document,
    new_uuid,
    replacement,
    utc_now,
)
from blogpost.schemas.post import PostPayload, PostResponse
from blogpost.services.base import PostService

logger = logging.getLogger(__name__)


class UuidPostService(PostService):
    """Posts keyed by a service-generated UUID string."""

    id_strategy = ID_STRATEGY_UUID
    id_field = ID_FIELD
    echo_writes = False
    delete_status_code = 200

    async def create_post(self, payload: PostPayload) -> PostResponse:
        document = new_document(mutable_fields(payload.model_dump(), BASE_FIELDS), utc_now())
        document[ID_FIELD] = new_uuid()

        try:
            # insert_one adds `_id` to the dict it is given
            await self.collection.insert_one(dict(document))
        except PyMongoError as e:
            raise self._storage_error("insert", e, {"post_id": document[ID_FIELD]})

        logger.info("Post created: %s", document[ID_FIELD])
        return self._to_response(document)

    async def get_post(self, post_id: str) -> PostResponse:
        try:
            document = await self.collection.find_one({ID_FIELD: post_id})
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
        changes = replacement(mutable_fields(payload.model_dump(), BASE_FIELDS), utc_now())

        try:
            result = await self.collection.update_one({ID_FIELD: post_id}, {"$set": changes})
        except PyMongoError as e:
            raise self._storage_error("update_one", e, {"post_id": post_id})

        logger.info("Post %s updated: matched=%d", post_id, result.matched_count)
        return None

    async def delete_post(self, post_id: str) -> None:
        try:
            result = await self.collection.delete_one({ID_FIELD: post_id})
        except PyMongoError as e:
            raise self._storage_error("delete_one", e, {"post_id": post_id})

        logger.info("Post %s deleted: removed=%d", post_id, result.deleted_count)
