"""
Renders a single blog post according to where its content lives.

Database-backed posts render the stored Markdown body under the stored
title. File-backed posts render the body of ``{slug}{ext}`` from the content
directory under the title from that file's front matter.
"""

from __future__ import annotations

import asyncio
import logging

from markdown_it import MarkdownIt

from portfolio.content import DatabaseBackedPost, FileBackedPost, PostVariant
from portfolio.content_files import PostFileReader
from portfolio.db import as_utc
from portfolio.schemas import RenderedPost

logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark", {"html": True})


def render_markdown(content: str | None) -> str:
    """Render Markdown content to HTML; empty content renders as ''."""
    if content:
        return _md.render(content).strip()
    return ""


async def render_post(variant: PostVariant, reader: PostFileReader) -> RenderedPost:
    """
    Render ``variant`` to HTML.

    Raises ContentNotFoundError or ContentParseError for file-backed posts
    whose file is missing or malformed.
    """
    post = variant.post
    if isinstance(variant, FileBackedPost):
        document = await asyncio.to_thread(reader.read, post.slug)
        title = str(document.metadata.get("title") or "")
        body = document.body
    elif isinstance(variant, DatabaseBackedPost):
        title = post.title
        body = post.body or ""
    else:
        raise TypeError(f"Unsupported post variant: {type(variant).__name__}")

    return RenderedPost(
        slug=post.slug,
        title=title,
        author=post.author,
        published_at=as_utc(post.published_at),
        summary=post.summary,
        source=variant.source.value,
        html=render_markdown(body),
    )
