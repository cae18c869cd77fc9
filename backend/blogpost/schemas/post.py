"""
Blog Post API - Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the wire contract of the posts API.
How:   FastAPI validates request bodies against PostPayload, serializes
       PostResponse by alias (camelCase timestamps), and builds the OpenAPI
       docs from both.

Schemas are separate from the stored documents: the `id` on the wire is
always a string, whether the document keeps it in `id` or `_id`.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostPayload(BaseModel):
    """
    Body of POST /post and PUT /post/{id}.

    Every field is optional; the service fills missing ones with "".
    `author` and `status` are stored only by the objectid strategy.
    Unknown keys (including a client-sent `id`, `createdAt` or `updatedAt`)
    are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, description="Post title")
    content: Optional[str] = Field(default=None, description="Post body")
    author: Optional[str] = Field(default=None, description="Author name (objectid strategy)")
    status: Optional[str] = Field(default=None, description="Free-form status (objectid strategy)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(BaseModel):
    """
    A stored post as returned by the API.

    `author` and `status` are None (and dropped from the JSON) for the
    uuid strategy.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="UUID string or 24-character hex ObjectId")
    title: str = Field(default="")
    content: str = Field(default="")
    author: Optional[str] = Field(default=None)
    status: Optional[str] = Field(default=None)
    created_at: datetime = Field(alias="createdAt", description="Creation time (UTC)")
    updated_at: datetime = Field(alias="updatedAt", description="Last update time (UTC)")


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx answer.

    Example:
        {
            "error": "validation_error",
            "message": "'abc' is not a valid post identifier",
            "details": {"field": "id"},
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="MongoDB connectivity: connected, disconnected")
    id_strategy: str = Field(description="uuid or objectid")
    uptime_seconds: float = Field(description="Seconds since service started")
