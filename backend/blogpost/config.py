"""
Blog Post API - Application Configuration
===========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types and ranges, and exposes a singleton `settings` object.
Who:   Imported by the app factory, the storage layer and the entry point.
When:  Loaded once at module import time.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

ID_STRATEGY_UUID = "uuid"
ID_STRATEGY_OBJECTID = "objectid"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for a local MongoDB on the
    standard port. Attributes are grouped by concern.
    """

    # ── MongoDB ───────────────────────────────────────────────────────────
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string",
    )
    mongodb_database: str = Field(default="blog")
    mongodb_collection: str = Field(default="posts")

    # What: How long the driver waits for a usable server before failing a call
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=100, le=120_000)

    # What: Startup ping attempts before the process gives up
    # Request-time calls are never retried; only the initial connection is.
    mongodb_connect_attempts: int = Field(default=3, ge=1, le=10)
    mongodb_connect_min_wait: int = Field(default=1, ge=1, le=30)
    mongodb_connect_max_wait: int = Field(default=5, ge=1, le=120)

    # ── Post Identifiers ──────────────────────────────────────────────────
    # uuid:     service-issued UUID strings stored in `id`
    # objectid: MongoDB ObjectIds stored in `_id`
    post_id_strategy: str = Field(default=ID_STRATEGY_UUID)

    # What: objectid strategy only; insert a new post when PUT matches nothing
    post_upsert_on_update: bool = Field(default=True)

    @field_validator("post_id_strategy")
    @classmethod
    def validate_id_strategy(cls, v: str) -> str:
        """Ensures the identifier strategy is one we implement."""
        valid = {ID_STRATEGY_UUID, ID_STRATEGY_OBJECTID}
        lower = v.strip().lower()
        if lower not in valid:
            raise ValueError(f"Invalid post_id_strategy '{v}'. Must be one of: {valid}")
        return lower

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: comma-separated origins, "*" for any
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MONGODB_URI and mongodb_uri both work
    }


# Singleton instance, imported throughout the application
settings = Settings()
