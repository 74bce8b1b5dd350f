"""Canonical path derivation for content items.

The canonical path is the join key between content items and stored
annotations, so it has to be byte-for-byte stable across runs::

    /2024/03/05/hello-%E4%B8%96%E7%95%8C/
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import quote

from postscribe.config.errors import ConfigurationError

from .clock import ensure_utc

if TYPE_CHECKING:
    from datetime import datetime

    from .model import ContentItem

# encodeURIComponent leaves these untouched besides alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


class SlugFallback(StrEnum):
    """How to key an item that carries no explicit slug."""

    FILENAME = "filename"
    ERROR = "error"


class SlugResolutionError(ConfigurationError):
    """Raised when an item's slug cannot be derived under the configured fallback."""


def encode_path_segment(segment: str) -> str:
    if segment.isascii():
        return segment
    return quote(segment, safe=_URI_COMPONENT_SAFE)


def canonical_path(publish_date: datetime, slug: str) -> str:
    """Return ``/{year}/{month}/{day}/{slug}/`` using the UTC calendar date."""

    utc_date = ensure_utc(publish_date)
    encoded_slug = "/".join(encode_path_segment(part) for part in slug.split("/"))
    return f"/{utc_date.year}/{utc_date.month:02d}/{utc_date.day:02d}/{encoded_slug}/"


def resolve_slug(item: ContentItem, *, fallback: SlugFallback = SlugFallback.FILENAME) -> str:
    if item.slug and item.slug.strip():
        return item.slug.strip()
    if fallback is SlugFallback.ERROR:
        raise SlugResolutionError(
            f"Item {item.title!r} ({item.id}) has no slug and the slug fallback is disabled"
        )
    if item.source_path is None or not item.source_path.stem:
        raise SlugResolutionError(
            f"Item {item.title!r} ({item.id}) has neither a slug nor a source file name"
        )
    return item.source_path.stem


def item_path(item: ContentItem, *, fallback: SlugFallback = SlugFallback.FILENAME) -> str:
    return canonical_path(item.publish_date, resolve_slug(item, fallback=fallback))


__all__ = [
    "SlugFallback",
    "SlugResolutionError",
    "canonical_path",
    "encode_path_segment",
    "item_path",
    "resolve_slug",
]
