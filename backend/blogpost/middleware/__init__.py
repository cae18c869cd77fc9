"""
Blog Post API - Middleware Package

    Request → [Request ID] → [Access Log] → [CORS] → Route Handler
"""
