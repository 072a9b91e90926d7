"""
Dependency wiring for the FastAPI app.

Clients are built once per application by ``create_app`` and kept on
``app.state``; request handlers receive them through ``Depends`` so tests
can build an app around their own fakes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from portfolio.config import Settings
from portfolio.content import ContentFetcher
from portfolio.content_files import PostFileReader
from portfolio.db import DbClient, InMemoryDbClient, SqlDbClient
from portfolio.seed import load_document, seed_store
from portfolio.storage import (
    AttachmentResolver,
    InMemoryStorageClient,
    S3StorageClient,
    StorageClient,
)

logger = logging.getLogger(__name__)


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory record store")
        db = InMemoryDbClient()
        if settings.seed_file:
            seed_store(db, load_document(settings.seed_file))
        return db
    return SqlDbClient(settings.database_url)


def build_storage_client(settings: Settings) -> StorageClient:
    if settings.use_in_memory_backends or not settings.storage_bucket:
        logger.info("Using in-memory attachment storage")
        return InMemoryStorageClient()
    return S3StorageClient(
        bucket=settings.storage_bucket,
        region=settings.storage_region or "",
        endpoint=settings.storage_endpoint or "",
        access_key_id=settings.aws_access_key_id or "",
        secret_access_key=settings.aws_secret_access_key or "",
    )


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db


def get_storage_client(request: Request) -> StorageClient:
    return request.app.state.storage


def get_attachment_resolver(
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_app_settings),
) -> AttachmentResolver:
    return AttachmentResolver(storage, expires_in=settings.attachment_url_expires_in)


def get_content_fetcher(
    db: DbClient = Depends(get_db_client),
    resolver: AttachmentResolver = Depends(get_attachment_resolver),
) -> ContentFetcher:
    return ContentFetcher(db, resolver)


def get_post_reader(settings: Settings = Depends(get_app_settings)) -> PostFileReader:
    return PostFileReader(settings.content_dir, settings.post_file_extension)
