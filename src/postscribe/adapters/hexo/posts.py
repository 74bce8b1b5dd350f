"""Load content items from a Hexo-style posts directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter
import yaml
from pydantic import ValidationError

from postscribe.config.errors import ConfigurationError
from postscribe.domain.model import ContentItem

from .schema import FrontMatter

if TYPE_CHECKING:
    import os
    from datetime import tzinfo

log = getLogger(__name__)

POST_GLOB = "*.md"


@dataclass(slots=True)
class LoadedPosts:
    """Posts that parsed, and the ones that exist but could not be turned into items."""

    items: list[ContentItem] = field(default_factory=list[ContentItem])
    rejected: list[Path] = field(default_factory=list[Path])


def _localize(value: datetime | None, timezone: tzinfo) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone)
    return value


def creation_time(stat: os.stat_result) -> datetime | None:
    """Return the file's birth time, or ``None`` where the platform does not record one.

    Modification and inode-change times move on every edit, including excerpt
    rewrites, so they cannot stand in for a publish date.
    """

    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime is None:
        return None
    return datetime.fromtimestamp(birthtime, tz=UTC)


def load_post(path: Path, *, root: Path, timezone: tzinfo = UTC) -> ContentItem | None:
    """Parse one post, returning ``None`` (with a warning) when it is unusable."""

    try:
        post = frontmatter.load(path)
        stat = path.stat()
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        log.warning("Ignoring unreadable post %s: %s", path, exc)
        return None

    try:
        meta = FrontMatter.model_validate(post.metadata)
    except ValidationError as exc:
        log.warning("Ignoring post %s with invalid front matter: %s", path, exc)
        return None

    publish_date = _localize(meta.date, timezone) or creation_time(stat)
    if publish_date is None:
        log.warning("Ignoring post %s: no date in front matter and no file creation time", path)
        return None

    return ContentItem(
        id=path.relative_to(root).as_posix(),
        title=meta.title or path.stem,
        slug=meta.slug,
        publish_date=publish_date,
        updated_at=_localize(meta.updated, timezone)
        or datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        raw_text=post.content,
        is_draft=meta.is_draft,
        source_path=path,
    )


def load_posts(posts_dir: Path, *, timezone: tzinfo = UTC) -> LoadedPosts:
    """Return every post below ``posts_dir``, ordered by file path."""

    root = Path(posts_dir).expanduser().resolve()
    if not root.is_dir():
        raise ConfigurationError(f"Posts directory does not exist: {root}")

    loaded = LoadedPosts()
    for path in sorted(root.rglob(POST_GLOB)):
        if not path.is_file():
            continue
        item = load_post(path, root=root, timezone=timezone)
        if item is None:
            loaded.rejected.append(path)
        else:
            loaded.items.append(item)

    log.info(
        "Loaded %d posts from %s (%d rejected)", len(loaded.items), root, len(loaded.rejected)
    )
    return loaded


__all__ = ["LoadedPosts", "creation_time", "load_post", "load_posts"]
