"""
Render states shared by every page section.

A section is always in exactly one of four states: waiting for the browser
to fetch it (LOADING), fetched with nothing to show (EMPTY), fetched with
records (POPULATED) or failed (FAILED). Section templates branch on the
status; LOADING placeholders are drawn from a ``PlaceholderShape`` so they
occupy the same space as the populated markup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "Could not load this section."


class SectionStatus(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    POPULATED = "populated"
    FAILED = "failed"


@dataclass(frozen=True)
class PlaceholderShape:
    """Element counts and sizes a loading placeholder renders."""

    items: int = 1
    lines: tuple[str, ...] = ("100%",)
    height: str = "1em"


@dataclass(frozen=True)
class SectionState(Generic[T]):
    status: SectionStatus
    data: Optional[T] = None
    message: str = ""
    shape: Optional[PlaceholderShape] = None
    src: Optional[str] = None

    @classmethod
    def loading(cls, shape: PlaceholderShape, src: str) -> "SectionState[T]":
        return cls(SectionStatus.LOADING, shape=shape, src=src)

    @classmethod
    def empty(cls, message: str) -> "SectionState[T]":
        return cls(SectionStatus.EMPTY, message=message)

    @classmethod
    def populated(cls, data: T) -> "SectionState[T]":
        return cls(SectionStatus.POPULATED, data=data)

    @classmethod
    def failed(cls, message: str = DEFAULT_ERROR_MESSAGE) -> "SectionState[T]":
        return cls(SectionStatus.FAILED, message=message)

    @property
    def is_loading(self) -> bool:
        return self.status is SectionStatus.LOADING

    @property
    def is_empty(self) -> bool:
        return self.status is SectionStatus.EMPTY

    @property
    def is_populated(self) -> bool:
        return self.status is SectionStatus.POPULATED

    @property
    def is_failed(self) -> bool:
        return self.status is SectionStatus.FAILED


@dataclass(frozen=True)
class SectionSpec:
    """How one named section is fetched and drawn."""

    name: str
    template: str
    fetch: Callable[[Any], Awaitable[Any]]
    empty_message: str
    shape: PlaceholderShape


def state_from_result(result: Any, empty_message: str) -> SectionState:
    """Map a fetch result to EMPTY (None or no records) or POPULATED."""
    if result is None:
        return SectionState.empty(empty_message)
    if isinstance(result, (list, tuple)) and not result:
        return SectionState.empty(empty_message)
    return SectionState.populated(result)


async def load_section(
    name: str, fetch: Callable[[], Awaitable[T]], empty_message: str
) -> SectionState[T]:
    """
    Await one section's fetch and convert the outcome to a render state.

    Failures are logged and contained in a FAILED state so sibling sections
    still render.
    """
    try:
        result = await fetch()
    except Exception:
        logger.exception("Section %r failed to load", name)
        return SectionState.failed()
    return state_from_result(result, empty_message)
