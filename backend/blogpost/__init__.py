"""
Blog Post API - Application Package
=====================================

What: CRUD HTTP service over a single "post" resource stored in MongoDB.
How:  Layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← method + path table, status codes
    ├─────────────────────────────────────┤
    │         Services (Post logic)       │  ← one storage call per operation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← document codec + pydantic wire models
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← AsyncMongoClient + collection handle
    └─────────────────────────────────────┘

Two identifier strategies share every layer above the services:
    - uuid:     the service issues a UUID string stored in the `id` field
    - objectid: MongoDB assigns an ObjectId stored in `_id`
"""

__version__ = "1.0.0"
