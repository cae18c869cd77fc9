"""
Blog Post API - Process Entry Point
=====================================

Usage:
    python -m blogpost

Equivalent to `uvicorn blogpost.main:app --host $BACKEND_HOST --port $BACKEND_PORT`.
If MongoDB is unreachable at startup the lifespan fails and uvicorn exits
before accepting connections.
"""

import uvicorn

from blogpost.config import settings


def main() -> None:
    uvicorn.run(
        "blogpost.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
