"""
Blog Post API - MongoDB Storage Handle
========================================

What:  Owns the single long-lived MongoDB client and the posts collection.
How:   connect_storage() builds an AsyncMongoClient, pings the server (with a
       bounded tenacity retry) and returns a PostStorage handle;
       close_storage() releases it. Both are called from the app lifespan.
Who:   The lifespan in main.py creates it; services receive the collection
       at construction; the health route pings through it.
When:  Created once at startup, shared by every request, closed on shutdown.

Connection pooling is left entirely to the driver. The handle is never
reconnected or closed by a request handler.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from blogpost.config import Settings
from blogpost.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class PostStorage:
    """
    Live reference to the posts collection and the client that owns it.

    `client` is optional so tests can hand in a bare collection double.
    """

    collection: Any
    client: Optional[Any] = None

    async def ping(self) -> None:
        """Round-trips a `ping` command; raises PyMongoError when unreachable."""
        if self.client is None:
            return
        await self.client.admin.command("ping")


async def connect_storage(config: Settings) -> PostStorage:
    """
    Connect to MongoDB and return the posts collection handle.

    The driver connects lazily, so the ping is what actually proves the
    server is reachable. A failed final attempt raises
    StorageUnavailableError, which aborts application startup.
    """
    client: AsyncMongoClient = AsyncMongoClient(
        config.mongodb_uri,
        serverSelectionTimeoutMS=config.mongodb_server_selection_timeout_ms,
        tz_aware=True,
        appname="blogpost",
    )
    storage = PostStorage(
        collection=client[config.mongodb_database][config.mongodb_collection],
        client=client,
    )

    try:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(PyMongoError),
            stop=stop_after_attempt(config.mongodb_connect_attempts),
            wait=wait_exponential_jitter(
                initial=config.mongodb_connect_min_wait,
                max=config.mongodb_connect_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await storage.ping()
    except PyMongoError as e:
        logger.error("MongoDB ping failed: %s", str(e))
        await client.close()
        raise StorageUnavailableError(
            uri=config.mongodb_uri,
            attempts=config.mongodb_connect_attempts,
            context={"error_type": type(e).__name__},
        ) from e

    logger.info(
        "Connected to MongoDB: database=%s collection=%s",
        config.mongodb_database,
        config.mongodb_collection,
    )
    return storage


async def close_storage(storage: Optional[PostStorage]) -> None:
    """Closes the client behind the handle, if this process opened one."""
    if storage is None or storage.client is None:
        return
    await storage.client.close()
    logger.info("MongoDB client closed")


def get_storage(request: Request) -> PostStorage:
    """FastAPI dependency returning the storage handle owned by this app."""
    return request.app.state.storage
