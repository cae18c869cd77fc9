"""
Blog Post API - Abstract Post Service
=======================================

What:  The contract every identifier strategy implements, plus the shared
       pieces (error translation, document decoding, the factory).
How:   Concrete services receive the posts collection at construction and
       issue exactly one storage call per operation.
Who:   Route handlers call it through the `get_post_service` dependency.

Response shaping differs per strategy and is declared here as attributes
so the routes never branch on the strategy name:

    attribute             uuid    objectid
    ────────────────────  ──────  ────────
    echo_writes           False   True
    delete_status_code    200     204
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as SchemaError

from blogpost.config import ID_STRATEGY_OBJECTID, ID_STRATEGY_UUID, Settings
from blogpost.exceptions import DatabaseError
from blogpost.models.post import decode_document
from blogpost.schemas.post import PostPayload, PostResponse

logger = logging.getLogger(__name__)


class PostService(ABC):
    """
    CRUD over the posts collection.

    Error Handling Strategy:
        Driver errors (PyMongoError) and stored documents that fail schema
        validation are wrapped in DatabaseError carrying the original text.
        NotFoundError and ValidationError propagate as raised.
    """

    id_strategy: str = ""
    id_field: str = ""
    echo_writes: bool = False
    delete_status_code: int = 200

    def __init__(self, collection: Any):
        self.collection = collection

    @abstractmethod
    async def create_post(self, payload: PostPayload) -> PostResponse:
        """Insert a new post with fresh timestamps and return it."""
        ...

    @abstractmethod
    async def get_post(self, post_id: str) -> PostResponse:
        """
        Fetch one post.

        Raises:
            NotFoundError: no document carries this id
        """
        ...

    @abstractmethod
    async def list_posts(self) -> List[PostResponse]:
        """Every stored post, fully materialised."""
        ...

    @abstractmethod
    async def update_post(self, post_id: str, payload: PostPayload) -> Optional[PostResponse]:
        """
        Replace the mutable fields and refresh updatedAt.

        Returns the post after the update, or None when the strategy does
        not read it back.
        """
        ...

    @abstractmethod
    async def delete_post(self, post_id: str) -> None:
        """Remove at most one post. A missing id is not an error."""
        ...

    # ── Shared helpers ────────────────────────────────────────────────────

    def _to_response(self, document: Mapping[str, Any]) -> PostResponse:
        try:
            return PostResponse.model_validate(decode_document(document, self.id_field))
        except SchemaError as e:
            raise self._storage_error("decode", e, {"post_id": str(document.get(self.id_field))})

    def _to_responses(self, documents: List[Mapping[str, Any]]) -> List[PostResponse]:
        # One bad document fails the whole listing.
        return [self._to_response(document) for document in documents]

    def _storage_error(
        self,
        operation: str,
        exc: Exception,
        context: Optional[Dict[str, Any]] = None,
    ) -> DatabaseError:
        ctx = dict(context or {})
        ctx.update({"operation": operation, "error_type": type(exc).__name__})
        logger.error("MongoDB %s failed: %s | Context: %s", operation, str(exc), ctx)
        return DatabaseError(message=str(exc), context=ctx)


def build_post_service(config: Settings, collection: Any) -> PostService:
    """Select the PostService implementation for the configured id strategy."""
    if config.post_id_strategy == ID_STRATEGY_OBJECTID:
        from blogpost.services.objectid_posts import ObjectIdPostService

        return ObjectIdPostService(collection, upsert_on_update=config.post_upsert_on_update)
    if config.post_id_strategy == ID_STRATEGY_UUID:
        from blogpost.services.uuid_posts import UuidPostService

        return UuidPostService(collection)
    raise ValueError(f"Unknown post_id_strategy '{config.post_id_strategy}'")

