"""Decision and summary types for a reconciliation pass.

Decisions are transient: they describe what happened to one content item or
one orphaned annotation path and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from postscribe.domain.identity import SlugFallback

if TYPE_CHECKING:
    from postscribe.domain.model import Annotation, ContentItem

DEFAULT_UPDATE_THRESHOLD = timedelta(milliseconds=60_000)


class ReconcileMode(StrEnum):
    """Which decisions a pass may take."""

    FULL = "full"
    CREATE_ONLY = "create-only"


class DecisionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    DELETE = "delete"


class SkipReason(StrEnum):
    UNCHANGED = "unchanged"
    WITHIN_THRESHOLD = "within-threshold"
    ALREADY_ANNOTATED = "already-annotated"
    SUMMARIZATION_FAILED = "summarization-failed"
    PERSISTENCE_FAILED = "persistence-failed"
    MISSING_METADATA = "missing-metadata"
    ERROR = "error"


@dataclass(slots=True, frozen=True, kw_only=True)
class Decision:
    """Outcome for one item (create/update/skip) or orphan path (delete/skip)."""

    kind: DecisionKind
    path: str
    item: ContentItem | None = None
    annotation: Annotation | None = None
    reason: SkipReason | None = None

    def __post_init__(self) -> None:
        if (self.kind is DecisionKind.SKIP) != (self.reason is not None):
            raise ValueError("Skip decisions, and only skip decisions, carry a reason")
        if self.kind is DecisionKind.DELETE and self.annotation is None:
            raise ValueError("Delete decisions must reference the annotation to remove")

    @classmethod
    def create(cls, path: str, item: ContentItem) -> Decision:
        return cls(kind=DecisionKind.CREATE, path=path, item=item)

    @classmethod
    def update(cls, path: str, item: ContentItem, annotation: Annotation) -> Decision:
        return cls(kind=DecisionKind.UPDATE, path=path, item=item, annotation=annotation)

    @classmethod
    def skip(
        cls,
        path: str,
        reason: SkipReason,
        *,
        item: ContentItem | None = None,
        annotation: Annotation | None = None,
    ) -> Decision:
        return cls(
            kind=DecisionKind.SKIP,
            path=path,
            item=item,
            annotation=annotation,
            reason=reason,
        )

    @classmethod
    def delete(cls, annotation: Annotation) -> Decision:
        return cls(kind=DecisionKind.DELETE, path=annotation.path, annotation=annotation)


@dataclass(slots=True, frozen=True)
class ReconcileSettings:
    update_threshold: timedelta = DEFAULT_UPDATE_THRESHOLD
    mode: ReconcileMode = ReconcileMode.FULL
    slug_fallback: SlugFallback = SlugFallback.FILENAME

    def __post_init__(self) -> None:
        if self.update_threshold < timedelta(0):
            raise ValueError("Update threshold must be non-negative")


@dataclass(slots=True)
class ReconciliationSummary:
    """Counters and decisions of one pass, kept for observability only."""

    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    deleted: int = 0
    decisions: list[Decision] = field(default_factory=list[Decision])

    @property
    def processed(self) -> int:
        return self.created + self.updated

    def record(self, decision: Decision) -> None:
        self.decisions.append(decision)
        if decision.kind is DecisionKind.CREATE:
            self.created += 1
        elif decision.kind is DecisionKind.UPDATE:
            self.updated += 1
        elif decision.kind is DecisionKind.SKIP:
            self.skipped += 1
        else:
            self.deleted += 1

    def of_kind(self, kind: DecisionKind) -> list[Decision]:
        return [decision for decision in self.decisions if decision.kind is kind]


__all__ = [
    "DEFAULT_UPDATE_THRESHOLD",
    "Decision",
    "DecisionKind",
    "ReconcileMode",
    "ReconcileSettings",
    "ReconciliationSummary",
    "SkipReason",
]
