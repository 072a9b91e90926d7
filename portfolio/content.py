"""
Content fetcher: reads records from the store and normalizes them for pages.

Normalizing means three things: attachment references are resolved to URLs
(concurrently, one lookup per reference), list collections are ordered for
display, and posts are filtered by their publication flag and classified by
where their body lives.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from portfolio.db import (
    DbClient,
    PostRecord,
    ProfileRecord,
    ProjectRecord,
    as_utc,
)
from portfolio.errors import UnknownPostSourceError
from portfolio.schemas import (
    Contact,
    Education,
    PostSummary,
    Profile,
    Project,
    Social,
    WorkExperience,
)
from portfolio.storage import AttachmentResolver

logger = logging.getLogger(__name__)


class PostSource(str, Enum):
    DATABASE = "database"
    MDX = "mdx"


@dataclass(frozen=True)
class DatabaseBackedPost:
    """A post whose Markdown body is stored on the record itself."""

    post: PostRecord
    source: PostSource = PostSource.DATABASE


@dataclass(frozen=True)
class FileBackedPost:
    """A post whose content lives in a file keyed by its slug."""

    post: PostRecord
    source: PostSource = PostSource.MDX


PostVariant = Union[DatabaseBackedPost, FileBackedPost]


def classify_post(post: PostRecord) -> PostVariant:
    try:
        source = PostSource(post.source)
    except ValueError:
        raise UnknownPostSourceError(post.slug, str(post.source)) from None
    if source is PostSource.MDX:
        return FileBackedPost(post)
    return DatabaseBackedPost(post)


def _published_sort_key(post: PostRecord) -> float:
    published_at = as_utc(post.published_at)
    return published_at.timestamp() if published_at else float("-inf")


class ContentFetcher:
    """Read-only access to normalized site content."""

    def __init__(self, store: DbClient, resolver: AttachmentResolver):
        self.store = store
        self.resolver = resolver
        self._profile_task: Optional[asyncio.Task] = None

    async def _read(self, method, *args):
        # Store clients are synchronous; keep them off the event loop.
        return await asyncio.to_thread(method, *args)

    async def get_profile(self) -> Optional[Profile]:
        """
        Return the profile with its attachments resolved, or None.

        The read is shared by every caller on this fetcher, so sections of one
        page that all show the profile cost a single store read.
        """
        if self._profile_task is None:
            self._profile_task = asyncio.ensure_future(self._load_profile())
        return await self._profile_task

    async def _load_profile(self) -> Optional[Profile]:
        record: Optional[ProfileRecord] = await self._read(self.store.get_profile)
        if record is None:
            return None
        image_url, *icon_urls = await self.resolver.resolve_many(
            [record.profile_image_ref, *(s.icon_ref for s in record.socials)]
        )
        return Profile(
            name=record.name,
            subtitle=record.subtitle,
            description=record.description,
            contact=Contact(
                email=record.contact.email,
                phone=record.contact.phone,
                location=record.contact.location,
            ),
            profile_image_url=image_url,
            socials=[
                Social(platform=social.platform, url=social.url, icon_url=icon_url)
                for social, icon_url in zip(record.socials, icon_urls)
            ],
        )

    async def list_work_experience(self) -> list[WorkExperience]:
        records = await self._read(self.store.list_work_experience)
        return [
            WorkExperience(
                id=record.id,
                company=record.company,
                title=record.title,
                start_date=record.start_date,
                end_date=record.end_date,
                duties=list(record.duties),
                order=record.order,
            )
            for record in sorted(records, key=lambda r: r.order)
        ]

    async def list_education(self) -> list[Education]:
        records = await self._read(self.store.list_education)
        return [
            Education(
                id=record.id,
                institution=record.institution,
                degree=record.degree,
                start_date=record.start_date,
                end_date=record.end_date,
                order=record.order,
            )
            for record in sorted(records, key=lambda r: r.order)
        ]

    async def list_projects(self) -> list[Project]:
        records: list[ProjectRecord] = sorted(
            await self._read(self.store.list_projects), key=lambda r: r.order
        )
        image_urls = await self.resolver.resolve_many(r.image_ref for r in records)
        return [
            Project(
                id=record.id,
                title=record.title,
                description=record.description,
                image_url=image_url,
                url=record.url,
                order=record.order,
            )
            for record, image_url in zip(records, image_urls)
        ]

    async def list_published_posts(self) -> list[PostSummary]:
        records = await self._read(self.store.list_published_posts)
        published = [record for record in records if record.is_published]
        if len(published) != len(records):
            logger.warning(
                "Store returned %d unpublished posts in the published listing",
                len(records) - len(published),
            )
        published.sort(key=_published_sort_key, reverse=True)
        return [
            PostSummary(
                title=record.title,
                slug=record.slug,
                author=record.author,
                published_at=as_utc(record.published_at),
                summary=record.summary,
            )
            for record in published
        ]

    async def get_post_by_slug(self, slug: str) -> Optional[PostVariant]:
        """
        Return the post for ``slug`` classified by source, or None if absent.

        Raises UnknownPostSourceError when the stored source is not one the
        site can render.
        """
        record = await self._read(self.store.get_post_by_slug, slug)
        if record is None:
            return None
        return classify_post(record)
