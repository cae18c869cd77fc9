"""
Blog Post API - Post Route Handlers
=====================================

What:  The five CRUD endpoints plus the 501 catch-all on the item path.
How:   Each handler decodes the request, makes one PostService call, and
       picks the status code. The service is the one built for this app
       in the lifespan (see main.py), so routes never touch MongoDB.

Route Table:
    POST    /post               create   → 201
    GET     /posts              list     → 200
    GET     /post/{post_id}     get      → 200
    PUT     /post/{post_id}     update   → 200
    DELETE  /post/{post_id}     delete   → 200 (uuid) / 204 (objectid)
    other   /post/{post_id}              → 501

Writes echo the stored post only when the service sets `echo_writes`.
"""

import logging
from typing import List, Union

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as SchemaError

from blogpost.exceptions import MethodNotImplementedError, ValidationError
from blogpost.schemas.post import ErrorResponse, PostPayload, PostResponse
from blogpost.services.base import PostService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

ITEM_PATH = "/post/{post_id}"
UNSUPPORTED_ITEM_METHODS = ["POST", "PATCH", "OPTIONS", "TRACE"]


def get_post_service(request: Request) -> PostService:
    """FastAPI dependency returning the PostService owned by this app."""
    return request.app.state.post_service


def _empty(status_code: int) -> Response:
    return Response(status_code=status_code, media_type="application/json")


async def read_payload(request: Request) -> PostPayload:
    """
    FastAPI dependency decoding the request body as a PostPayload.

    The body is parsed as JSON whatever the Content-Type header says, so
    `curl -d` and text/plain clients are served like application/json ones.

    Raises:
        ValidationError: the body is not JSON, or a field has the wrong type
    """
    body = await request.body()
    try:
        return PostPayload.model_validate_json(body)
    except SchemaError as e:
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in e.errors()
        ]
        message = errors[0]["msg"] if errors else "Invalid request body"
        raise ValidationError(message=message, field="body", context={"errors": errors})


# read_payload bypasses FastAPI body parsing, so the docs get the schema here
PAYLOAD_DOCS = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": PostPayload.model_json_schema()}},
    }
}


@router.post(
    "/post",
    status_code=201,
    response_model=PostResponse,
    response_model_exclude_none=True,
    responses={
        201: {"description": "Post created (body only for the objectid strategy)"},
        400: {"description": "Body is not a valid post", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Create a post",
    openapi_extra=PAYLOAD_DOCS,
)
async def create_post(
    payload: PostPayload = Depends(read_payload),
    service: PostService = Depends(get_post_service),
) -> Union[PostResponse, Response]:
    """Stores a new post; createdAt and updatedAt are set to the same instant."""
    post = await service.create_post(payload)
    if not service.echo_writes:
        return _empty(201)
    return post


@router.get(
    "/posts",
    response_model=List[PostResponse],
    response_model_exclude_none=True,
    responses={500: {"description": "Storage error", "model": ErrorResponse}},
    summary="List every post",
)
async def list_posts(
    service: PostService = Depends(get_post_service),
) -> List[PostResponse]:
    """Returns every stored post, unordered and unpaginated."""
    return await service.list_posts()


@router.get(
    ITEM_PATH,
    response_model=PostResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Malformed identifier", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Get a post by id",
)
async def get_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await service.get_post(post_id)


@router.put(
    ITEM_PATH,
    response_model=PostResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Post replaced (body only for the objectid strategy)"},
        400: {"description": "Malformed body or identifier", "model": ErrorResponse},
        404: {"description": "No post to update (upsert disabled)", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Replace a post",
    openapi_extra=PAYLOAD_DOCS,
)
async def update_post(
    post_id: str,
    payload: PostPayload = Depends(read_payload),
    service: PostService = Depends(get_post_service),
) -> Union[PostResponse, Response]:
    """
    Full replace of title and content (and author and status for objectid).

    Fields missing from the body are reset to "". The identifier always
    comes from the path; createdAt is never changed by this call.
    """
    post = await service.update_post(post_id, payload)
    if post is None or not service.echo_writes:
        return _empty(200)
    return post


@router.delete(
    ITEM_PATH,
    responses={
        200: {"description": "Deleted (uuid strategy)"},
        204: {"description": "Deleted (objectid strategy)"},
        400: {"description": "Malformed identifier", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> Response:
    """Succeeds whether or not a post with this id existed."""
    await service.delete_post(post_id)
    if service.delete_status_code == 204:
        return Response(status_code=204)
    return _empty(service.delete_status_code)


@router.api_route(
    ITEM_PATH,
    methods=UNSUPPORTED_ITEM_METHODS,
    include_in_schema=False,
)
async def item_method_not_implemented(post_id: str, request: Request) -> Response:
    raise MethodNotImplementedError(method=request.method, context={"post_id": post_id})
