"""
Blog Post API - Services Layer
================================

Service Inventory:
    - PostService (abstract): create / get / list / update / delete contract
    - UuidPostService:        service-issued UUID ids in the `id` field
    - ObjectIdPostService:    MongoDB ObjectId ids in `_id`, upsert on update

`build_post_service()` picks the implementation from the configured
identifier strategy.
"""

from blogpost.services.base import PostService, build_post_service

__all__ = ["PostService", "build_post_service"]
