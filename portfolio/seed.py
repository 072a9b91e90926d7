"""
Load site content from a YAML (or JSON) document into a record store.

Used by ``scripts/seed_content.py`` and by the in-memory store when
``SEED_FILE`` is configured for local development. The document layout::

    profile: {name, subtitle, description, contact: {...}, profile_image, socials: [...]}
    work_experience: [{company, title, start_date, end_date, duties, order}]
    education: [{institution, degree, start_date, end_date, order}]
    projects: [{title, description, image, url, order}]
    posts: [{title, slug, author, published_at, is_published, summary, body, source}]

Attachment fields (``profile_image``, ``socials[].icon``, ``projects[].image``)
are storage references.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import TypeAdapter

from portfolio.content import PostSource
from portfolio.db import (
    ContactInfo,
    DbClient,
    EducationRecord,
    PostRecord,
    ProfileRecord,
    ProjectRecord,
    SocialLink,
    WorkExperienceRecord,
)

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(Optional[datetime])


def parse_published_at(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates, ISO strings and unix timestamps (s or ms)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return _datetime_adapter.validate_python(value)


def load_document(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def seed_store(db: DbClient, data: dict) -> dict[str, int]:
    """Write every entity in ``data`` to ``db``; returns counts per collection."""
    counts = {
        "profile": 0,
        "work_experience": 0,
        "education": 0,
        "projects": 0,
        "posts": 0,
    }

    profile = data.get("profile")
    if profile:
        contact = profile.get("contact") or {}
        db.save_profile(
            ProfileRecord(
                name=profile["name"],
                subtitle=profile.get("subtitle", ""),
                description=profile.get("description", ""),
                contact=ContactInfo(
                    email=contact.get("email", ""),
                    phone=contact.get("phone", ""),
                    location=contact.get("location", ""),
                ),
                profile_image_ref=profile.get("profile_image"),
                socials=[
                    SocialLink(
                        platform=social["platform"],
                        url=social.get("url", ""),
                        icon_ref=social.get("icon"),
                    )
                    for social in profile.get("socials") or []
                ],
            )
        )
        counts["profile"] = 1

    for entry in data.get("work_experience") or []:
        db.add_work_experience(
            WorkExperienceRecord(
                company=entry["company"],
                title=entry["title"],
                start_date=str(entry.get("start_date", "")),
                end_date=str(entry.get("end_date", "")),
                duties=[str(duty) for duty in entry.get("duties") or []],
                order=entry.get("order", 0),
            )
        )
        counts["work_experience"] += 1

    for entry in data.get("education") or []:
        db.add_education(
            EducationRecord(
                institution=entry["institution"],
                degree=entry["degree"],
                start_date=str(entry.get("start_date", "")),
                end_date=str(entry.get("end_date", "")),
                order=entry.get("order", 0),
            )
        )
        counts["education"] += 1

    for entry in data.get("projects") or []:
        db.add_project(
            ProjectRecord(
                title=entry["title"],
                description=entry.get("description", ""),
                image_ref=entry.get("image"),
                url=entry.get("url", ""),
                order=entry.get("order", 0),
            )
        )
        counts["projects"] += 1

    for entry in data.get("posts") or []:
        source = PostSource(entry.get("source", PostSource.DATABASE.value))
        db.save_post(
            PostRecord(
                title=entry["title"],
                slug=entry["slug"],
                author=entry.get("author", ""),
                published_at=parse_published_at(entry.get("published_at")),
                is_published=bool(entry.get("is_published", False)),
                summary=entry.get("summary", ""),
                body=entry.get("body"),
                source=source.value,
            )
        )
        counts["posts"] += 1

    logger.info("Seeded content: %s", counts)
    return counts
