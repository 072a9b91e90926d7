import asyncio
import time
import unittest
from datetime import datetime, timezone

from portfolio.content import (
    ContentFetcher,
    DatabaseBackedPost,
    FileBackedPost,
    PostSource,
)
from portfolio.db import (
    ContactInfo,
    EducationRecord,
    InMemoryDbClient,
    PostRecord,
    ProfileRecord,
    ProjectRecord,
    SocialLink,
    WorkExperienceRecord,
)
from portfolio.errors import UnknownPostSourceError
from portfolio.storage import AttachmentResolver, InMemoryStorageClient


def ts(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class LeakyStore(InMemoryDbClient):
    """A store whose published listing also returns drafts."""

    def list_published_posts(self):
        return list(self.posts.values())


class CountingProfileStore(InMemoryDbClient):
    def __init__(self):
        super().__init__()
        self.profile_reads = 0

    def get_profile(self):
        self.profile_reads += 1
        return super().get_profile()


class SlowResolver(AttachmentResolver):
    delay = 0.2

    async def resolve_url(self, reference):
        await asyncio.sleep(self.delay)
        return f"https://cdn.test/{reference}" if reference else None


class ContentFetcherTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.fetcher = ContentFetcher(self.db, AttachmentResolver(self.storage))

    async def test_profile_absent_is_none(self):
        self.assertIsNone(await self.fetcher.get_profile())

    async def test_profile_attachments_are_resolved(self):
        self.storage.upload_bytes("images/me.png", b"png")
        self.storage.upload_bytes("icons/gh.svg", b"svg")
        self.db.save_profile(
            ProfileRecord(
                name="Ada",
                contact=ContactInfo(email="ada@example.com", phone="123", location="London"),
                profile_image_ref="images/me.png",
                socials=[
                    SocialLink("GitHub", "https://github.com/ada", "icons/gh.svg"),
                    SocialLink("Mastodon", "https://mastodon.social/@ada", "icons/missing.svg"),
                    SocialLink("Site", "https://ada.dev"),
                ],
            )
        )

        with self.assertLogs("portfolio.storage", level="WARNING"):
            profile = await self.fetcher.get_profile()

        self.assertEqual(profile.name, "Ada")
        self.assertEqual(profile.contact.phone, "123")
        self.assertEqual(
            profile.profile_image_url,
            "https://example.test/storage/images/me.png?op=get&expires=3600",
        )
        self.assertEqual([s.platform for s in profile.socials], ["GitHub", "Mastodon", "Site"])
        self.assertIn("icons/gh.svg", profile.socials[0].icon_url)
        self.assertIsNone(profile.socials[1].icon_url)
        self.assertIsNone(profile.socials[2].icon_url)

    async def test_concurrent_profile_reads_share_one_store_read(self):
        db = CountingProfileStore()
        db.save_profile(ProfileRecord(name="Ada"))
        fetcher = ContentFetcher(db, AttachmentResolver(self.storage))

        first, second = await asyncio.gather(fetcher.get_profile(), fetcher.get_profile())
        again = await fetcher.get_profile()

        self.assertEqual(db.profile_reads, 1)
        self.assertEqual(first.name, "Ada")
        self.assertIs(first, second)
        self.assertIs(first, again)

    async def test_lists_are_ordered_by_order_field(self):
        self.db.add_work_experience(WorkExperienceRecord(company="Later", title="Dev", order=3))
        self.db.add_work_experience(WorkExperienceRecord(company="First", title="Dev", order=1))
        self.db.add_education(EducationRecord(institution="Second", degree="MSc", order=2))
        self.db.add_education(EducationRecord(institution="First", degree="BSc", order=1))

        jobs = await self.fetcher.list_work_experience()
        education = await self.fetcher.list_education()

        self.assertEqual([job.company for job in jobs], ["First", "Later"])
        self.assertEqual([edu.institution for edu in education], ["First", "Second"])

    async def test_empty_collections_are_empty_lists(self):
        self.assertEqual(await self.fetcher.list_work_experience(), [])
        self.assertEqual(await self.fetcher.list_education(), [])
        self.assertEqual(await self.fetcher.list_projects(), [])
        self.assertEqual(await self.fetcher.list_published_posts(), [])

    async def test_projects_with_equal_order_are_stable(self):
        self.db.add_project(ProjectRecord(title="A", order=1))
        self.db.add_project(ProjectRecord(title="B", order=1))
        self.db.add_project(ProjectRecord(title="C", order=0))

        first = [p.title for p in await self.fetcher.list_projects()]
        second = [p.title for p in await self.fetcher.list_projects()]

        self.assertEqual(first, ["C", "A", "B"])
        self.assertEqual(first, second)

    async def test_project_without_resolvable_image_keeps_entry(self):
        self.storage.upload_bytes("shots/a.png", b"a")
        self.db.add_project(ProjectRecord(title="A", image_ref="shots/a.png", order=1))
        self.db.add_project(ProjectRecord(title="B", image_ref="shots/gone.png", order=2))
        self.db.add_project(ProjectRecord(title="C", order=3))

        with self.assertLogs("portfolio.storage", level="WARNING"):
            projects = await self.fetcher.list_projects()

        self.assertEqual([p.title for p in projects], ["A", "B", "C"])
        self.assertIn("shots/a.png", projects[0].image_url)
        self.assertIsNone(projects[1].image_url)
        self.assertIsNone(projects[2].image_url)

    async def test_published_posts_newest_first(self):
        for n in (2, 1, 3):
            self.db.save_post(
                PostRecord(title=f"Post {n}", slug=f"post-{n}", published_at=ts(n), is_published=True)
            )
        self.db.save_post(
            PostRecord(title="Draft", slug="draft", published_at=ts(4), is_published=False)
        )

        posts = await self.fetcher.list_published_posts()

        self.assertEqual([p.slug for p in posts], ["post-3", "post-2", "post-1"])

    async def test_posts_without_timestamp_sort_last(self):
        self.db.save_post(PostRecord(title="Undated", slug="undated", is_published=True))
        self.db.save_post(
            PostRecord(title="Dated", slug="dated", published_at=ts(10), is_published=True)
        )
        posts = await self.fetcher.list_published_posts()
        self.assertEqual([p.slug for p in posts], ["dated", "undated"])

    async def test_drafts_never_listed_even_if_store_leaks_them(self):
        store = LeakyStore()
        store.save_post(PostRecord(title="Live", slug="live", published_at=ts(1), is_published=True))
        store.save_post(PostRecord(title="Draft", slug="draft", published_at=ts(2)))
        fetcher = ContentFetcher(store, AttachmentResolver(InMemoryStorageClient()))

        with self.assertLogs("portfolio.content", level="WARNING"):
            posts = await fetcher.list_published_posts()

        self.assertEqual([p.slug for p in posts], ["live"])

    async def test_get_post_by_slug_missing_is_none(self):
        self.db.save_post(PostRecord(title="Here", slug="here", is_published=True))
        self.assertIsNone(await self.fetcher.get_post_by_slug("not-here"))

    async def test_get_post_by_slug_classifies_source(self):
        self.db.save_post(PostRecord(title="Db", slug="db", body="# Hi", source="database"))
        self.db.save_post(PostRecord(title="File", slug="file", source="mdx"))

        db_post = await self.fetcher.get_post_by_slug("db")
        file_post = await self.fetcher.get_post_by_slug("file")

        self.assertIsInstance(db_post, DatabaseBackedPost)
        self.assertEqual(db_post.source, PostSource.DATABASE)
        self.assertEqual(db_post.post.body, "# Hi")
        self.assertIsInstance(file_post, FileBackedPost)
        self.assertEqual(file_post.source, PostSource.MDX)

    async def test_unknown_source_is_an_error(self):
        self.db.save_post(PostRecord(title="Odd", slug="odd", source="notion"))
        with self.assertRaises(UnknownPostSourceError) as ctx:
            await self.fetcher.get_post_by_slug("odd")
        self.assertEqual(ctx.exception.source, "notion")

    async def test_attachment_lookups_are_concurrent(self):
        for i in range(5):
            self.db.add_project(ProjectRecord(title=f"P{i}", image_ref=f"p{i}.png", order=i))
        fetcher = ContentFetcher(self.db, SlowResolver(self.storage))

        started = time.perf_counter()
        projects = await fetcher.list_projects()
        elapsed = time.perf_counter() - started

        self.assertEqual([p.image_url for p in projects], [f"https://cdn.test/p{i}.png" for i in range(5)])
        # Bounded by the slowest single lookup, not the 1s sum.
        self.assertLess(elapsed, 0.6)


if __name__ == "__main__":
    unittest.main()
