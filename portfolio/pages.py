"""
HTML pages and section fragments.

Every page is a set of independently fetched sections. In "server" render
mode all sections of a page are fetched concurrently and each outcome is
drawn on its own; in "client" mode the page ships placeholders and the
browser pulls each section from ``/sections/{name}``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from portfolio.config import Settings
from portfolio.content import ContentFetcher
from portfolio.content_files import PostFileReader
from portfolio.dependencies import (
    get_app_settings,
    get_content_fetcher,
    get_post_reader,
)
from portfolio.errors import ContentError
from portfolio.posts import render_post
from portfolio.rendering import (
    PlaceholderShape,
    SectionSpec,
    SectionState,
    load_section,
)
from portfolio.schemas import RenderedPost

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


templates.env.filters["format_date"] = format_date

POST_NOT_FOUND_MESSAGE = "Post not found."
POST_ERROR_MESSAGE = "Error loading post."

SECTIONS: dict[str, SectionSpec] = {
    spec.name: spec
    for spec in (
        SectionSpec(
            name="profile-hero",
            template="sections/profile_hero.html",
            fetch=lambda fetcher: fetcher.get_profile(),
            empty_message="No profile found.",
            shape=PlaceholderShape(items=4, lines=("60%", "80%", "100%")),
        ),
        SectionSpec(
            name="profile-contact",
            template="sections/profile_contact.html",
            fetch=lambda fetcher: fetcher.get_profile(),
            empty_message="No profile found.",
            shape=PlaceholderShape(items=3, lines=("80%",)),
        ),
        SectionSpec(
            name="work-experience",
            template="sections/work_experience.html",
            fetch=lambda fetcher: fetcher.list_work_experience(),
            empty_message="No work experience yet.",
            shape=PlaceholderShape(items=2, lines=("90%", "85%", "80%")),
        ),
        SectionSpec(
            name="education",
            template="sections/education.html",
            fetch=lambda fetcher: fetcher.list_education(),
            empty_message="No education yet.",
            shape=PlaceholderShape(items=2, lines=("70%", "80%", "30%")),
        ),
        SectionSpec(
            name="projects",
            template="sections/projects.html",
            fetch=lambda fetcher: fetcher.list_projects(),
            empty_message="No projects yet.",
            shape=PlaceholderShape(
                items=2, lines=("70%", "100%", "40%"), height="10em"
            ),
        ),
        SectionSpec(
            name="posts",
            template="sections/posts.html",
            fetch=lambda fetcher: fetcher.list_published_posts(),
            empty_message="No posts found.",
            shape=PlaceholderShape(items=3, lines=("60%", "25%")),
        ),
    )
}

ABOUT_SECTIONS = (
    "profile-contact",
    "profile-hero",
    "work-experience",
    "education",
    "projects",
)
WORK_SECTIONS = ("work-experience", "projects")
BLOG_SECTIONS = ("posts",)

router = APIRouter()


def render_fragment(spec: SectionSpec, state: SectionState) -> Markup:
    template = templates.get_template(spec.template)
    return Markup(template.render(state=state, section=spec))


async def fetch_section(spec: SectionSpec, fetcher: ContentFetcher) -> SectionState:
    return await load_section(
        spec.name, lambda: spec.fetch(fetcher), spec.empty_message
    )


async def render_sections(
    request: Request,
    names: tuple[str, ...],
    fetcher: ContentFetcher,
    settings: Settings,
) -> dict[str, Markup]:
    specs = [SECTIONS[name] for name in names]
    if settings.section_render_mode == "client":
        states = [
            SectionState.loading(
                spec.shape, src=request.url_for("section_fragment", name=spec.name).path
            )
            for spec in specs
        ]
    else:
        states = await asyncio.gather(
            *(fetch_section(spec, fetcher) for spec in specs)
        )
    return {
        spec.name: render_fragment(spec, state) for spec, state in zip(specs, states)
    }


def _page(request: Request, name: str, settings: Settings, status_code: int = 200, **context):
    return templates.TemplateResponse(
        request,
        name,
        {"site_title": settings.site_title, **context},
        status_code=status_code,
    )


@router.get("/", include_in_schema=False)
def home():
    return RedirectResponse(url="/about")


@router.get("/about", response_class=HTMLResponse)
async def about_page(
    request: Request,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    settings: Settings = Depends(get_app_settings),
):
    sections = await render_sections(request, ABOUT_SECTIONS, fetcher, settings)
    return _page(request, "about.html", settings, sections=sections, active="about")


@router.get("/work", response_class=HTMLResponse)
async def work_page(
    request: Request,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    settings: Settings = Depends(get_app_settings),
):
    sections = await render_sections(request, WORK_SECTIONS, fetcher, settings)
    return _page(request, "work.html", settings, sections=sections, active="work")


@router.get("/blog", response_class=HTMLResponse)
async def blog_page(
    request: Request,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    settings: Settings = Depends(get_app_settings),
):
    sections = await render_sections(request, BLOG_SECTIONS, fetcher, settings)
    return _page(request, "blog.html", settings, sections=sections, active="blog")


@router.get("/blog/{slug}", response_class=HTMLResponse)
async def blog_post_page(
    request: Request,
    slug: str,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    reader: PostFileReader = Depends(get_post_reader),
    settings: Settings = Depends(get_app_settings),
):
    post: Optional[RenderedPost] = None
    message: Optional[str] = None
    status_code = 200
    try:
        variant = await fetcher.get_post_by_slug(slug)
        if variant is None:
            message = POST_NOT_FOUND_MESSAGE
            status_code = 404
        else:
            post = await render_post(variant, reader)
    except ContentError as exc:
        logger.error("Failed to load post %r: %s", slug, exc)
        message = POST_ERROR_MESSAGE
    except Exception:
        logger.exception("Unexpected failure loading post %r", slug)
        message = POST_ERROR_MESSAGE
    return _page(
        request,
        "post.html",
        settings,
        status_code=status_code,
        post=post,
        message=message,
        active="blog",
    )


@router.get("/sections/{name}", response_class=HTMLResponse, name="section_fragment")
async def section_fragment(
    name: str,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
):
    spec = SECTIONS.get(name)
    if spec is None:
        raise HTTPException(status_code=404, detail="Section not found")
    state = await fetch_section(spec, fetcher)
    return HTMLResponse(render_fragment(spec, state))
