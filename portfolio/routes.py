"""
JSON API routes exposing normalized site content.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from portfolio.content import ContentFetcher
from portfolio.content_files import PostFileReader
from portfolio.db import DbClient
from portfolio.dependencies import (
    get_content_fetcher,
    get_db_client,
    get_post_reader,
    get_storage_client,
)
from portfolio.errors import ContentError
from portfolio.posts import render_post
from portfolio.schemas import (
    Education,
    HealthResponse,
    PostSummary,
    Profile,
    Project,
    RenderedPost,
    SignUrlResponse,
    WorkExperience,
)
from portfolio.storage import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    return HealthResponse(
        status="ok", store=type(db).__name__, storage=type(storage).__name__
    )


@router.get("/profile", response_model=Profile)
async def get_profile(fetcher: ContentFetcher = Depends(get_content_fetcher)):
    profile = await fetcher.get_profile()
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/work-experience", response_model=list[WorkExperience])
async def list_work_experience(
    fetcher: ContentFetcher = Depends(get_content_fetcher),
):
    return await fetcher.list_work_experience()


@router.get("/education", response_model=list[Education])
async def list_education(fetcher: ContentFetcher = Depends(get_content_fetcher)):
    return await fetcher.list_education()


@router.get("/projects", response_model=list[Project])
async def list_projects(fetcher: ContentFetcher = Depends(get_content_fetcher)):
    return await fetcher.list_projects()


@router.get("/posts", response_model=list[PostSummary])
async def list_posts(fetcher: ContentFetcher = Depends(get_content_fetcher)):
    return await fetcher.list_published_posts()


@router.get("/posts/{slug}", response_model=RenderedPost)
async def get_post(
    slug: str,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    reader: PostFileReader = Depends(get_post_reader),
):
    try:
        variant = await fetcher.get_post_by_slug(slug)
        if variant is None:
            raise HTTPException(status_code=404, detail="Post not found")
        return await render_post(variant, reader)
    except ContentError as exc:
        logger.error("Failed to load post %r: %s", slug, exc)
        raise HTTPException(status_code=502, detail="Error loading post") from exc


@router.get("/sign-url", response_model=SignUrlResponse)
def sign_url(
    path: str = Query(..., description="Object path in storage"),
    expires_in: int = Query(3600, ge=60, le=86400),
    storage: StorageClient = Depends(get_storage_client),
):
    return SignUrlResponse(url=storage.presign_get(path, expires_in=expires_in))
