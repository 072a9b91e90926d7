"""
CLI helper to load site content into the configured record store.
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.config import get_settings
from portfolio.db import InMemoryDbClient
from portfolio.dependencies import build_db_client, build_storage_client
from portfolio.seed import load_document, seed_store

logger = logging.getLogger(__name__)


def upload_attachments(storage, attachments_dir: Path) -> int:
    uploaded = 0
    for path in sorted(attachments_dir.rglob("*")):
        if not path.is_file():
            continue
        key = path.relative_to(attachments_dir).as_posix()
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        storage.upload_bytes(key, path.read_bytes(), content_type=content_type)
        logger.info("Uploaded %s", key)
        uploaded += 1
    return uploaded


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed portfolio content")
    parser.add_argument(
        "content_file",
        type=Path,
        help="YAML or JSON document with profile, work_experience, education, projects and posts",
    )
    parser.add_argument(
        "-a",
        "--attachments",
        type=Path,
        default=None,
        help="Directory whose files are uploaded to storage, keyed by relative path",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    settings = get_settings()
    db = build_db_client(settings)
    if isinstance(db, InMemoryDbClient):
        logger.error("DATABASE_URL is not set; refusing to seed an in-memory store")
        return 1

    counts = seed_store(db, load_document(args.content_file))
    if args.attachments:
        storage = build_storage_client(settings)
        counts["attachments"] = upload_attachments(storage, args.attachments)
    print(", ".join(f"{name}={count}" for name, count in counts.items()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
