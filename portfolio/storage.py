"""
Attachment storage for S3-compatible object stores and in-memory testing.

Records keep attachments as storage references (object keys). The
``AttachmentResolver`` turns those references into fetchable URLs at read
time so raw references never reach the pages.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from portfolio.errors import AttachmentUnresolvableError

logger = logging.getLogger(__name__)


class StorageClient(Protocol):
    """Defines the operations the site needs from object storage."""

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        ...

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        ...

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        ...

    def upload_file(self, src_path: str, dest_path: str) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{path}?op=get&expires={expires_in}"

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        if path not in self.stored_objects:
            raise AttachmentUnresolvableError(path)
        return self.presign_get(path, expires_in=expires_in)

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self.stored_objects[path] = bytes(data)

    def upload_file(self, src_path: str, dest_path: str) -> None:
        with open(src_path, "rb") as f:
            self.stored_objects[dest_path] = f.read()


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Tencent COS, MinIO, R2).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Virtual-hosted style addressing works for both AWS and COS.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
        )

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        try:
            self._client.head_object(Bucket=self.bucket, Key=path)
            return self.presign_get(path, expires_in=expires_in)
        except (ClientError, BotoCoreError) as exc:
            raise AttachmentUnresolvableError(path) from exc

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
        )

    def upload_file(self, src_path: str, dest_path: str) -> None:
        self._client.upload_file(src_path, self.bucket, dest_path)


class AttachmentResolver:
    """Resolves attachment references to URLs without blocking the event loop."""

    def __init__(self, storage: StorageClient, expires_in: int = 3600):
        self.storage = storage
        self.expires_in = expires_in

    async def resolve_url(self, reference: Optional[str]) -> Optional[str]:
        """
        Return a fetchable URL for ``reference``, or None.

        None is returned both for absent references and for references that
        cannot be resolved; the latter are logged so one broken attachment
        does not fail the section it belongs to.
        """
        if not reference:
            return None
        try:
            return await asyncio.to_thread(
                self.storage.get_url, reference, self.expires_in
            )
        except AttachmentUnresolvableError:
            logger.warning("Attachment %r could not be resolved", reference)
            return None

    async def resolve_many(
        self, references: Iterable[Optional[str]]
    ) -> list[Optional[str]]:
        """Resolve several references concurrently, preserving input order."""
        return list(
            await asyncio.gather(*(self.resolve_url(ref) for ref in references))
        )
