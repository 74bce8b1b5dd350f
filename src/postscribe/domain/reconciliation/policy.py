"""Decision policy for reconciling content items against stored annotations.

Responsibilities of this module:
- index bot-authored annotations by canonical path
- plan create/update/skip per item from timestamps alone
- find annotations whose path no longer belongs to any live item

Everything here is deterministic and free of I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from postscribe.domain.clock import ensure_utc

from .contracts import Decision, SkipReason

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import timedelta

    from postscribe.domain.model import Annotation, ContentItem


def index_by_path(annotations: Iterable[Annotation], *, author: str) -> dict[str, Annotation]:
    """Map each path to its most recently updated annotation by ``author``."""

    index: dict[str, Annotation] = {}
    for annotation in annotations:
        if not annotation.is_authored_by(author):
            continue
        current = index.get(annotation.path)
        if current is None or ensure_utc(annotation.updated_at) > ensure_utc(current.updated_at):
            index[annotation.path] = annotation
    return index


def plan_item(
    item: ContentItem,
    path: str,
    existing: Annotation | None,
    *,
    threshold: timedelta,
) -> Decision:
    """Decide what to do for ``item`` before any summarization happens."""

    if existing is None:
        return Decision.create(path, item)

    item_updated = ensure_utc(item.updated_at)
    annotation_updated = ensure_utc(existing.updated_at)
    if item_updated <= annotation_updated:
        return Decision.skip(path, SkipReason.UNCHANGED, item=item, annotation=existing)
    # sub-threshold drift is noise, not an edit
    if item_updated - annotation_updated <= threshold:
        return Decision.skip(path, SkipReason.WITHIN_THRESHOLD, item=item, annotation=existing)
    return Decision.update(path, item, existing)


def find_orphans(
    index: Mapping[str, Annotation],
    current_paths: Iterable[str],
) -> list[Annotation]:
    """Return indexed annotations whose path matches no live item, ordered by path."""

    live = set(current_paths)
    return [index[path] for path in sorted(index) if path not in live]


__all__ = ["find_orphans", "index_by_path", "plan_item"]
