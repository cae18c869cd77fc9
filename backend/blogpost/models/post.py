"""
Blog Post API - Post Document Codec
=====================================

What:  Maps a Post between its MongoDB document and its wire representation.
How:   Plain functions over dicts; the wire side is validated afterwards by
       the pydantic schemas in blogpost.schemas.post.
Who:   Used by both PostService implementations.

Stored document shape (field names are the same on the wire):

    uuid strategy                     objectid strategy
    ─────────────                     ─────────────────
    {"id": "<uuid4>",                 {"_id": ObjectId(...),
     "title": "...",                   "title": "...",
     "content": "...",                 "content": "...",
     "createdAt": <date>,              "author": "...",
     "updatedAt": <date>}              "status": "...",
                                       "createdAt": <date>,
                                       "updatedAt": <date>}

MongoDB stores dates with millisecond precision, so every timestamp this
module produces is truncated to the millisecond. That keeps a post echoed
from a write equal to the same post read back.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping

from bson import ObjectId
from bson.errors import InvalidId

from blogpost.exceptions import ValidationError

ID_FIELD = "id"
OBJECT_ID_FIELD = "_id"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

# Fields a PUT replaces wholesale; anything missing from the body is reset.
BASE_FIELDS = ("title", "content")
AUTHORED_FIELDS = ("title", "content", "author", "status")


def utc_now() -> datetime:
    """Current UTC time at BSON date precision."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def new_uuid() -> str:
    """Opaque identifier for the uuid strategy."""
    return str(uuid.uuid4())


def parse_object_id(raw: str) -> ObjectId:
    """
    Parse a path segment as a 24-character hex ObjectId.

    Raises:
        ValidationError: the segment is not a valid ObjectId (→ 400)
    """
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"'{raw}' is not a valid post identifier",
            field="id",
            context={"expected": "24-character hex ObjectId"},
        )


def mutable_fields(payload: Mapping[str, Any], names: Iterable[str]) -> Dict[str, Any]:
    """Picks the named fields from a decoded body, defaulting each to ""."""
    return {name: payload.get(name) or "" for name in names}


def new_document(fields: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """Document for an insert: the given fields plus equal timestamps."""
    document = dict(fields)
    document[CREATED_AT] = now
    document[UPDATED_AT] = now
    return document


def replacement(fields: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """
    `$set` body for an update.

    Never touches the identifier or createdAt.
    """
    changes = dict(fields)
    changes[UPDATED_AT] = now
    return changes


def decode_document(document: Mapping[str, Any], id_field: str) -> Dict[str, Any]:
    """
    Flatten a stored document into wire field names.

    The identifier is read from `id_field` and rendered as a string
    (ObjectIds become their hex form). Other fields pass through; missing
    ones are left for schema validation to reject.
    """
    wire = {key: value for key, value in document.items() if key not in (ID_FIELD, OBJECT_ID_FIELD)}
    raw_id = document.get(id_field)
    if raw_id is not None:
        wire[ID_FIELD] = str(raw_id)
    return wire
