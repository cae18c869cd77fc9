"""
Blog Post API - Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, the storage layer and route handlers.

Exception Hierarchy:
    BlogPostError (base)
    ├── ValidationError            → 400 Bad Request
    ├── NotFoundError              → 404 Not Found
    ├── MethodNotImplementedError  → 501 Not Implemented
    ├── DatabaseError              → 500 Internal Server Error
    └── StorageUnavailableError    → startup abort (never reaches a client)
"""

from typing import Any, Dict, Optional


class BlogPostError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, and returned as `details`
                  only for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogPostError):
    """
    Raised when client input cannot be used.

    When:    Body is not valid JSON, a field has the wrong type, or a path
             identifier is not a valid ObjectId.
    HTTP:    400 Bad Request (FastAPI's own 422 is remapped to this)
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(BlogPostError):
    """
    Raised when a requested resource does not exist.

    When:    GET /post/{id} with an id no document carries.
    HTTP:    404 Not Found

    The driver returns None for a missed find_one; services convert that
    into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MethodNotImplementedError(BlogPostError):
    """
    Raised for HTTP methods the item path does not support.

    HTTP:    501 Not Implemented
    """

    def __init__(
        self,
        method: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["method"] = method
        super().__init__(message="Method not Implemented", context=ctx)
        self.method = method


class DatabaseError(BlogPostError):
    """
    Raised when a MongoDB operation fails.

    When:    Server selection timeout, network error, write error, or a stored
             document that cannot be decoded into a Post.
    HTTP:    500 Internal Server Error

    The driver's error text is the message returned to the caller.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageUnavailableError(BlogPostError):
    """
    Raised when MongoDB cannot be reached during startup.

    When:    Every startup ping attempt failed.
    Effect:  The lifespan propagates it and uvicorn aborts before serving.
    """

    def __init__(
        self,
        uri: str,
        attempts: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Could not connect to MongoDB at {uri} after {attempts} attempt(s)"
        ctx = context or {}
        ctx["attempts"] = attempts
        super().__init__(message=message, context=ctx)
        self.attempts = attempts
