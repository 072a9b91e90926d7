import time
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from portfolio.errors import AttachmentUnresolvableError
from portfolio.storage import AttachmentResolver, InMemoryStorageClient, S3StorageClient


class SlowStorageClient(InMemoryStorageClient):
    delay: float = 0.2

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        time.sleep(self.delay)
        return super().get_url(path, expires_in=expires_in)


class InMemoryStorageClientTests(unittest.TestCase):
    def test_get_url_requires_stored_object(self):
        storage = InMemoryStorageClient()
        with self.assertRaises(AttachmentUnresolvableError):
            storage.get_url("missing.png")
        storage.upload_bytes("present.png", b"png")
        self.assertIn("present.png", storage.get_url("present.png"))

    def test_presign_get_does_not_check_existence(self):
        url = InMemoryStorageClient().presign_get("foo/bar.png", expires_in=60)
        self.assertEqual(url, "https://example.test/storage/foo/bar.png?op=get&expires=60")


class S3StorageClientTests(unittest.TestCase):
    @patch("portfolio.storage.boto3.client")
    def test_get_url_presigns_existing_object(self, mock_client_factory):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://bucket.s3/signed"
        mock_client_factory.return_value = client
        storage = S3StorageClient(
            bucket="site", region="eu-west-1", endpoint="", access_key_id="", secret_access_key=""
        )

        self.assertEqual(storage.get_url("images/me.png", 120), "https://bucket.s3/signed")
        client.head_object.assert_called_once_with(Bucket="site", Key="images/me.png")
        client.generate_presigned_url.assert_called_once_with(
            ClientMethod="get_object",
            Params={"Bucket": "site", "Key": "images/me.png"},
            ExpiresIn=120,
        )

    @patch("portfolio.storage.boto3.client")
    def test_get_url_missing_object_is_unresolvable(self, mock_client_factory):
        client = MagicMock()
        client.head_object.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject"
        )
        mock_client_factory.return_value = client
        storage = S3StorageClient(
            bucket="site", region="", endpoint="", access_key_id="", secret_access_key=""
        )

        with self.assertRaises(AttachmentUnresolvableError):
            storage.get_url("images/missing.png")
        client.generate_presigned_url.assert_not_called()


class AttachmentResolverTests(unittest.IsolatedAsyncioTestCase):
    async def test_absent_reference_resolves_to_none(self):
        resolver = AttachmentResolver(InMemoryStorageClient())
        self.assertIsNone(await resolver.resolve_url(None))
        self.assertIsNone(await resolver.resolve_url(""))

    async def test_unresolvable_reference_is_logged_and_none(self):
        resolver = AttachmentResolver(InMemoryStorageClient())
        with self.assertLogs("portfolio.storage", level="WARNING"):
            self.assertIsNone(await resolver.resolve_url("gone.png"))

    async def test_resolve_many_preserves_order(self):
        storage = InMemoryStorageClient()
        storage.upload_bytes("a.png", b"a")
        storage.upload_bytes("c.png", b"c")
        resolver = AttachmentResolver(storage, expires_in=600)
        with self.assertLogs("portfolio.storage", level="WARNING"):
            urls = await resolver.resolve_many(["a.png", "b.png", None, "c.png"])
        self.assertEqual(
            urls,
            [
                "https://example.test/storage/a.png?op=get&expires=600",
                None,
                None,
                "https://example.test/storage/c.png?op=get&expires=600",
            ],
        )

    async def test_resolve_many_runs_lookups_concurrently(self):
        storage = SlowStorageClient()
        refs = [f"img-{i}.png" for i in range(5)]
        for ref in refs:
            storage.upload_bytes(ref, b"x")
        resolver = AttachmentResolver(storage)

        started = time.perf_counter()
        urls = await resolver.resolve_many(refs)
        elapsed = time.perf_counter() - started

        self.assertEqual(len(urls), 5)
        self.assertTrue(all(urls))
        # Sequential lookups would take 5 * 0.2s.
        self.assertLess(elapsed, 0.6)


if __name__ == "__main__":
    unittest.main()
