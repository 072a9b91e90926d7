"""
Configuration and settings for the portfolio site.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    site_title: str = Field(default="Portfolio")
    log_level: str = Field(default="INFO")

    # Record store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible attachment storage
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    attachment_url_expires_in: int = Field(default=3600, ge=60, le=604800)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    # YAML/JSON content loaded into the in-memory store at startup
    seed_file: Optional[str] = Field(default=None)

    # File-backed blog posts
    content_dir: str = Field(default="content/blog")
    post_file_extension: str = Field(default=".mdx")

    # "server" awaits every section before responding; "client" sends
    # placeholders and lets the browser fetch each section fragment.
    section_render_mode: Literal["server", "client"] = Field(default="server")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
