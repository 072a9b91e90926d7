"""
Record store for site content: SQLAlchemy and an in-memory test implementation.

The store holds five collections (profile, work experience, education,
projects, posts). Attachment fields hold storage references, never URLs.
List reads return rows in insertion order; display ordering is applied by
the content fetcher.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    Integer,
    String,
    Text,
    create_engine,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


class DbClient(Protocol):
    """Interface for record store access."""

    def get_profile(self) -> Optional["ProfileRecord"]:
        ...

    def list_work_experience(self) -> list["WorkExperienceRecord"]:
        ...

    def list_education(self) -> list["EducationRecord"]:
        ...

    def list_projects(self) -> list["ProjectRecord"]:
        ...

    def list_published_posts(self) -> list["PostRecord"]:
        ...

    def get_post_by_slug(self, slug: str) -> Optional["PostRecord"]:
        ...

    def save_profile(self, profile: "ProfileRecord") -> "ProfileRecord":
        ...

    def add_work_experience(
        self, entry: "WorkExperienceRecord"
    ) -> "WorkExperienceRecord":
        ...

    def add_education(self, entry: "EducationRecord") -> "EducationRecord":
        ...

    def add_project(self, entry: "ProjectRecord") -> "ProjectRecord":
        ...

    def save_post(self, post: "PostRecord") -> "PostRecord":
        ...


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class ContactInfo:
    email: str = ""
    phone: str = ""
    location: str = ""


@dataclass
class SocialLink:
    platform: str
    url: str
    icon_ref: Optional[str] = None


@dataclass
class ProfileRecord:
    name: str
    subtitle: str = ""
    description: str = ""
    contact: ContactInfo = field(default_factory=ContactInfo)
    profile_image_ref: Optional[str] = None
    socials: list[SocialLink] = field(default_factory=list)
    id: Optional[int] = None


@dataclass
class WorkExperienceRecord:
    company: str
    title: str
    start_date: str = ""
    end_date: str = ""
    duties: list[str] = field(default_factory=list)
    order: float = 0
    id: Optional[int] = None


@dataclass
class EducationRecord:
    institution: str
    degree: str
    start_date: str = ""
    end_date: str = ""
    order: float = 0
    id: Optional[int] = None


@dataclass
class ProjectRecord:
    title: str
    description: str = ""
    image_ref: Optional[str] = None
    url: str = ""
    order: float = 0
    id: Optional[int] = None


@dataclass
class PostRecord:
    title: str
    slug: str
    author: str = ""
    published_at: Optional[datetime] = None
    is_published: bool = False
    summary: str = ""
    body: Optional[str] = None
    source: str = "database"
    id: Optional[int] = None


class InMemoryDbClient:
    """Simple in-memory record store for development and tests."""

    def __init__(self):
        self.profiles: list[ProfileRecord] = []
        self.work_experience: list[WorkExperienceRecord] = []
        self.education: list[EducationRecord] = []
        self.projects: list[ProjectRecord] = []
        self.posts: Dict[str, PostRecord] = {}
        self._next_id = 1

    def _assign_id(self, record):
        record = replace(record, id=self._next_id)
        self._next_id += 1
        return record

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.profiles.clear()
        self.work_experience.clear()
        self.education.clear()
        self.projects.clear()
        self.posts.clear()
        self._next_id = 1

    def get_profile(self) -> Optional[ProfileRecord]:
        return self.profiles[0] if self.profiles else None

    def list_work_experience(self) -> list[WorkExperienceRecord]:
        return list(self.work_experience)

    def list_education(self) -> list[EducationRecord]:
        return list(self.education)

    def list_projects(self) -> list[ProjectRecord]:
        return list(self.projects)

    def list_published_posts(self) -> list[PostRecord]:
        return [post for post in self.posts.values() if post.is_published]

    def get_post_by_slug(self, slug: str) -> Optional[PostRecord]:
        return self.posts.get(slug)

    def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        record = self._assign_id(profile)
        if self.profiles:
            self.profiles[0] = record
        else:
            self.profiles.append(record)
        return record

    def add_work_experience(
        self, entry: WorkExperienceRecord
    ) -> WorkExperienceRecord:
        record = self._assign_id(entry)
        self.work_experience.append(record)
        return record

    def add_education(self, entry: EducationRecord) -> EducationRecord:
        record = self._assign_id(entry)
        self.education.append(record)
        return record

    def add_project(self, entry: ProjectRecord) -> ProjectRecord:
        record = self._assign_id(entry)
        self.projects.append(record)
        return record

    def save_post(self, post: PostRecord) -> PostRecord:
        existing = self.posts.get(post.slug)
        if existing:
            record = replace(
                post, id=existing.id, published_at=as_utc(post.published_at)
            )
        else:
            record = self._assign_id(
                replace(post, published_at=as_utc(post.published_at))
            )
        self.posts[post.slug] = record
        return record


class SqlDbClient:
    """
    SQLAlchemy-backed record store. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        engine_kwargs: dict = {}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # Reads run in worker threads; they must all see the same database.
            engine_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
            **engine_kwargs,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_profile_record(self, row: "ProfileRow") -> ProfileRecord:
        contact = row.contact or {}
        return ProfileRecord(
            id=row.id,
            name=row.name,
            subtitle=row.subtitle,
            description=row.description,
            contact=ContactInfo(
                email=contact.get("email", ""),
                phone=contact.get("phone", ""),
                location=contact.get("location", ""),
            ),
            profile_image_ref=row.profile_image_ref,
            socials=[
                SocialLink(
                    platform=social.get("platform", ""),
                    url=social.get("url", ""),
                    icon_ref=social.get("icon_ref"),
                )
                for social in row.socials or []
            ],
        )

    def _to_post_record(self, row: "PostRow") -> PostRecord:
        published_at = (
            datetime.fromtimestamp(row.published_at, tz=timezone.utc)
            if row.published_at is not None
            else None
        )
        return PostRecord(
            id=row.id,
            title=row.title,
            slug=row.slug,
            author=row.author,
            published_at=published_at,
            is_published=row.is_published,
            summary=row.summary,
            body=row.body,
            source=row.source,
        )

    def get_profile(self) -> Optional[ProfileRecord]:
        with self.Session() as session:
            stmt = select(ProfileRow).order_by(ProfileRow.id.asc()).limit(1)
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            return self._to_profile_record(row)

    def list_work_experience(self) -> list[WorkExperienceRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(WorkExperienceRow).order_by(WorkExperienceRow.id.asc())
            ).scalars()
            return [
                WorkExperienceRecord(
                    id=row.id,
                    company=row.company,
                    title=row.title,
                    start_date=row.start_date,
                    end_date=row.end_date,
                    duties=list(row.duties or []),
                    order=row.order,
                )
                for row in rows
            ]

    def list_education(self) -> list[EducationRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(EducationRow).order_by(EducationRow.id.asc())
            ).scalars()
            return [
                EducationRecord(
                    id=row.id,
                    institution=row.institution,
                    degree=row.degree,
                    start_date=row.start_date,
                    end_date=row.end_date,
                    order=row.order,
                )
                for row in rows
            ]

    def list_projects(self) -> list[ProjectRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ProjectRow).order_by(ProjectRow.id.asc())
            ).scalars()
            return [
                ProjectRecord(
                    id=row.id,
                    title=row.title,
                    description=row.description,
                    image_ref=row.image_ref,
                    url=row.url,
                    order=row.order,
                )
                for row in rows
            ]

    def list_published_posts(self) -> list[PostRecord]:
        with self.Session() as session:
            stmt = (
                select(PostRow)
                .where(PostRow.is_published.is_(True))
                .order_by(PostRow.id.asc())
            )
            return [
                self._to_post_record(row) for row in session.execute(stmt).scalars()
            ]

    def get_post_by_slug(self, slug: str) -> Optional[PostRecord]:
        with self.Session() as session:
            stmt = select(PostRow).where(PostRow.slug == slug)
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            return self._to_post_record(row)

    def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        contact = asdict(profile.contact)
        socials = [asdict(social) for social in profile.socials]
        with self.Session() as session:
            row = session.execute(
                select(ProfileRow).order_by(ProfileRow.id.asc()).limit(1)
            ).scalar_one_or_none()
            if row:
                row.name = profile.name
                row.subtitle = profile.subtitle
                row.description = profile.description
                row.contact = contact
                row.profile_image_ref = profile.profile_image_ref
                row.socials = socials
                row.updated_at = time.time()
            else:
                row = ProfileRow(
                    name=profile.name,
                    subtitle=profile.subtitle,
                    description=profile.description,
                    contact=contact,
                    profile_image_ref=profile.profile_image_ref,
                    socials=socials,
                    updated_at=time.time(),
                )
                session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_profile_record(row)

    def add_work_experience(
        self, entry: WorkExperienceRecord
    ) -> WorkExperienceRecord:
        with self.Session() as session:
            row = WorkExperienceRow(
                company=entry.company,
                title=entry.title,
                start_date=entry.start_date,
                end_date=entry.end_date,
                duties=list(entry.duties),
                order=entry.order,
            )
            session.add(row)
            session.commit()
            return replace(entry, id=row.id)

    def add_education(self, entry: EducationRecord) -> EducationRecord:
        with self.Session() as session:
            row = EducationRow(
                institution=entry.institution,
                degree=entry.degree,
                start_date=entry.start_date,
                end_date=entry.end_date,
                order=entry.order,
            )
            session.add(row)
            session.commit()
            return replace(entry, id=row.id)

    def add_project(self, entry: ProjectRecord) -> ProjectRecord:
        with self.Session() as session:
            row = ProjectRow(
                title=entry.title,
                description=entry.description,
                image_ref=entry.image_ref,
                url=entry.url,
                order=entry.order,
            )
            session.add(row)
            session.commit()
            return replace(entry, id=row.id)

    def save_post(self, post: PostRecord) -> PostRecord:
        published_at = as_utc(post.published_at)
        timestamp = published_at.timestamp() if published_at else None
        with self.Session() as session:
            row = session.execute(
                select(PostRow).where(PostRow.slug == post.slug)
            ).scalar_one_or_none()
            if row is None:
                row = PostRow(slug=post.slug)
                session.add(row)
            row.title = post.title
            row.author = post.author
            row.published_at = timestamp
            row.is_published = post.is_published
            row.summary = post.summary
            row.body = post.body
            row.source = post.source
            session.commit()
            session.refresh(row)
            return self._to_post_record(row)


Base = declarative_base()


class ProfileRow(Base):
    __tablename__ = "profile"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    subtitle = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    contact = Column(JSON, nullable=False, default=dict)
    profile_image_ref = Column(String, nullable=True)
    socials = Column(JSON, nullable=False, default=list)
    updated_at = Column(Float, nullable=False)


class WorkExperienceRow(Base):
    __tablename__ = "work_experience"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company = Column(String, nullable=False)
    title = Column(String, nullable=False)
    start_date = Column(String, nullable=False, default="")
    end_date = Column(String, nullable=False, default="")
    duties = Column(JSON, nullable=False, default=list)
    order = Column("sort_order", Float, nullable=False, default=0)


class EducationRow(Base):
    __tablename__ = "education"

    id = Column(Integer, primary_key=True, autoincrement=True)
    institution = Column(String, nullable=False)
    degree = Column(String, nullable=False)
    start_date = Column(String, nullable=False, default="")
    end_date = Column(String, nullable=False, default="")
    order = Column("sort_order", Float, nullable=False, default=0)


class ProjectRow(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    image_ref = Column(String, nullable=True)
    url = Column(String, nullable=False, default="")
    order = Column("sort_order", Float, nullable=False, default=0)


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False, default="")
    published_at = Column(Float, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False, index=True)
    summary = Column(Text, nullable=False, default="")
    body = Column(Text, nullable=True)
    source = Column(String, nullable=False, default="database")
