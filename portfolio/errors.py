"""Exceptions raised while loading site content."""


class ContentError(Exception):
    """Base exception for content loading failures."""


class ContentNotFoundError(ContentError):
    """Raised when a content file for a slug does not exist."""


class ContentParseError(ContentError):
    """Raised when a content file exists but cannot be parsed."""


class UnknownPostSourceError(ContentError):
    """Raised when a stored post names a source this site cannot render."""

    def __init__(self, slug: str, source: str):
        super().__init__(f"Post {slug!r} has unknown source {source!r}")
        self.slug = slug
        self.source = source


class AttachmentUnresolvableError(ContentError):
    """Raised by storage backends when a reference cannot be turned into a URL."""
