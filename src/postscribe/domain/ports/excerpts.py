"""Port for persisting summaries into content metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from postscribe.domain.model import ContentItem


@runtime_checkable
class ExcerptWriter(Protocol):
    """Writes the ``excerpt`` field of an item's metadata record."""

    def has_metadata(self, item: ContentItem) -> bool: ...

    def write_excerpt(self, item: ContentItem, excerpt: str) -> None:
        """Persist ``excerpt``; raise ``MissingMetadataError`` or ``PersistenceError``."""
        ...


__all__ = ["ExcerptWriter"]
