"""Reader for file-backed blog posts (Markdown/MDX with YAML front matter)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from portfolio.errors import ContentNotFoundError, ContentParseError

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


@dataclass
class PostDocument:
    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""


class PostFileReader:
    """Loads ``{slug}{extension}`` files from a content directory."""

    def __init__(self, content_dir: str | Path, extension: str = ".mdx"):
        self.content_dir = Path(content_dir)
        self.extension = extension if extension.startswith(".") else f".{extension}"

    def path_for(self, slug: str) -> Path:
        if not SLUG_PATTERN.match(slug or ""):
            raise ContentNotFoundError(f"Invalid post slug: {slug!r}")
        return self.content_dir / f"{slug}{self.extension}"

    def read(self, slug: str) -> PostDocument:
        """
        Read and split the file for ``slug`` into front matter and body.

        Raises:
            ContentNotFoundError: the file does not exist or cannot be read.
            ContentParseError: the file cannot be decoded or its front matter
                is not a YAML mapping.
        """
        path = self.path_for(slug)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ContentNotFoundError(str(path)) from exc
        except OSError as exc:
            raise ContentNotFoundError(f"{path} could not be read: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ContentParseError(f"{path} is not valid UTF-8") from exc

        try:
            parsed = frontmatter.loads(raw)
        except (yaml.YAMLError, ValueError) as exc:
            raise ContentParseError(f"{path}: invalid front matter: {exc}") from exc

        metadata = parsed.metadata
        if not isinstance(metadata, dict):
            raise ContentParseError(
                f"{path}: front matter is {type(metadata).__name__}, not a mapping"
            )
        return PostDocument(metadata=dict(metadata), body=parsed.content)
