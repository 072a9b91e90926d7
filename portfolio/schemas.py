"""
Pydantic schemas for normalized site content.

These are the shapes the pages and the JSON API consume: every attachment
field holds a resolved URL (or None), never a storage reference.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Contact(BaseModel):
    email: str = ""
    phone: str = ""
    location: str = ""


class Social(BaseModel):
    platform: str
    url: str
    icon_url: Optional[str] = None


class Profile(BaseModel):
    name: str
    subtitle: str = ""
    description: str = ""
    contact: Contact = Field(default_factory=Contact)
    profile_image_url: Optional[str] = None
    socials: list[Social] = Field(default_factory=list)


class WorkExperience(BaseModel):
    id: Optional[int] = None
    company: str
    title: str
    start_date: str = ""
    end_date: str = ""
    duties: list[str] = Field(default_factory=list)
    order: float = 0


class Education(BaseModel):
    id: Optional[int] = None
    institution: str
    degree: str
    start_date: str = ""
    end_date: str = ""
    order: float = 0


class Project(BaseModel):
    id: Optional[int] = None
    title: str
    description: str = ""
    image_url: Optional[str] = None
    url: str = ""
    order: float = 0


class PostSummary(BaseModel):
    title: str
    slug: str
    author: str = ""
    published_at: Optional[datetime] = None
    summary: str = ""


class RenderedPost(BaseModel):
    slug: str
    title: str
    author: str = ""
    published_at: Optional[datetime] = None
    summary: str = ""
    source: Literal["database", "mdx"]
    html: str


class SignUrlResponse(BaseModel):
    url: str


class HealthResponse(BaseModel):
    status: Literal["ok"]
    store: str
    storage: str
