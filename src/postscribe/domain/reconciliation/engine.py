"""Reconciliation engine: applies the decision policy through the ports.

One pass works like this:
1) resolve the canonical path of every live (non-draft) item
2) open the annotation store scope and index the bot's annotations by path
3) plan, summarize and write per item (create/update/skip)
4) sweep annotations whose path matches no live item (full mode only, and only
   when every content source could be read)

Per-item failures degrade to skips. Only ``StoreConnectionError`` ends the pass
early, and the store scope is released either way.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from postscribe.domain.clock import Clock, utcnow
from postscribe.domain.errors import (
    PersistenceError,
    StoreConnectionError,
    SummarizationError,
)
from postscribe.domain.identity import item_path
from postscribe.domain.model import Annotation, BotIdentity, new_record_id

from .contracts import (
    Decision,
    DecisionKind,
    ReconcileMode,
    ReconcileSettings,
    ReconciliationSummary,
    SkipReason,
)
from .policy import find_orphans, index_by_path, plan_item

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from postscribe.domain.model import ContentItem
    from postscribe.domain.ports import AnnotationUnitOfWork, ExcerptWriter, Summarizer


log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationContext:
    """Collaborators and settings for one pass, built once by the caller."""

    store: Callable[[], AnnotationUnitOfWork]
    summarizer: Summarizer
    excerpts: ExcerptWriter
    bot: BotIdentity = field(default_factory=BotIdentity)
    settings: ReconcileSettings = field(default_factory=ReconcileSettings)
    clock: Clock = utcnow


def render_body(summary: str) -> str:
    """Wrap a plain-prose summary in a single paragraph."""

    return f"<p>{html.escape(summary.strip(), quote=False)}</p>"


@dataclass(slots=True)
class ReconciliationEngine:
    """Run one reconciliation pass for a set of content items."""

    context: ReconciliationContext

    def reconcile(
        self,
        items: Iterable[ContentItem],
        *,
        unreadable: Sequence[str] = (),
    ) -> ReconciliationSummary:
        """Reconcile ``items``; ``unreadable`` names sources that exist but failed to load."""

        settings = self.context.settings
        live = [item for item in items if not item.is_draft]
        # every path is resolved up front; an unkeyed item would look like an orphan
        keyed = [(item, item_path(item, fallback=settings.slug_fallback)) for item in live]

        summary = ReconciliationSummary(total=len(keyed))
        log.info("Reconciling %d items (mode=%s)", len(keyed), settings.mode)

        with self.context.store() as store:
            index = index_by_path(
                store.annotations.list_by_author(self.context.bot.name),
                author=self.context.bot.name,
            )
            log.info("Found %d existing annotations by %s", len(index), self.context.bot.name)

            for item, path in keyed:
                summary.record(self._process_item(store, item, path, index))

            if settings.mode is ReconcileMode.FULL:
                self._sweep(store, index, [path for _, path in keyed], unreadable, summary)

        log.info(
            "Reconciliation finished: total=%s, processed=%s, created=%s, updated=%s, "
            "skipped=%s, deleted=%s",
            summary.total,
            summary.processed,
            summary.created,
            summary.updated,
            summary.skipped,
            summary.deleted,
        )
        return summary

    def _sweep(
        self,
        store: AnnotationUnitOfWork,
        index: dict[str, Annotation],
        current_paths: list[str],
        unreadable: Sequence[str],
        summary: ReconciliationSummary,
    ) -> None:
        orphans = find_orphans(index, current_paths)
        if unreadable:
            # an unreadable source still owns its annotation, whatever its path
            log.warning(
                "Skipping orphan sweep of %d annotations: %d sources could not be read (%s)",
                len(orphans),
                len(unreadable),
                ", ".join(unreadable),
            )
            return
        for orphan in orphans:
            summary.record(self._delete_orphan(store, orphan))

    def _process_item(
        self,
        store: AnnotationUnitOfWork,
        item: ContentItem,
        path: str,
        index: dict[str, Annotation],
    ) -> Decision:
        log.info("Processing %r (%s)", item.title, path)
        try:
            planned = self._plan(store, item, path, index.get(path))
            if planned.kind is DecisionKind.SKIP:
                log.info("Skipping %r: %s", item.title, planned.reason)
                return planned
            return self._apply(store, planned, item)
        except StoreConnectionError:
            raise
        except Exception:  # noqa: BLE001
            log.exception("Unexpected failure while processing %r (%s)", item.title, item.id)
            return Decision.skip(path, SkipReason.ERROR, item=item)

    def _plan(
        self,
        store: AnnotationUnitOfWork,
        item: ContentItem,
        path: str,
        existing: Annotation | None,
    ) -> Decision:
        settings = self.context.settings
        if settings.mode is ReconcileMode.CREATE_ONLY:
            if store.annotations.count_at_path(path, author=self.context.bot.name) > 0:
                return Decision.skip(path, SkipReason.ALREADY_ANNOTATED, item=item)
            return Decision.create(path, item)
        return plan_item(item, path, existing, threshold=settings.update_threshold)

    def _apply(self, store: AnnotationUnitOfWork, planned: Decision, item: ContentItem) -> Decision:
        path = planned.path
        if not self.context.excerpts.has_metadata(item):
            log.warning("Skipping %r (%s): no metadata record for its excerpt", item.title, item.id)
            return Decision.skip(path, SkipReason.MISSING_METADATA, item=item)

        try:
            text = self.context.summarizer(item.raw_text)
        except SummarizationError as exc:
            log.warning("Skipping %r (%s): summarization failed: %s", item.title, item.id, exc)
            return Decision.skip(path, SkipReason.SUMMARIZATION_FAILED, item=item)

        body = render_body(text)
        if planned.kind is DecisionKind.CREATE:
            failures = self._write_pair(store, item, text, lambda: self._insert(store, path, body))
        else:
            failures = self._write_pair(store, item, text, lambda: self._update(store, path, body))

        if failures:
            return Decision.skip(
                path,
                SkipReason.PERSISTENCE_FAILED,
                item=item,
                annotation=planned.annotation,
            )
        log.info("%s annotation for %r", planned.kind.capitalize(), item.title)
        return planned

    def _write_pair(
        self,
        store: AnnotationUnitOfWork,
        item: ContentItem,
        text: str,
        write_annotation: Callable[[], None],
    ) -> list[PersistenceError]:
        """Attempt both halves; neither failure stops the other or rolls it back."""

        failures: list[PersistenceError] = []
        try:
            write_annotation()
            store.commit()
        except PersistenceError as exc:
            store.rollback()
            log.error("Annotation write failed for %r (%s): %s", item.title, item.id, exc)
            failures.append(exc)

        try:
            self.context.excerpts.write_excerpt(item, text)
        except PersistenceError as exc:
            log.error("Excerpt write failed for %r (%s): %s", item.title, item.id, exc)
            failures.append(exc)

        return failures

    def _insert(self, store: AnnotationUnitOfWork, path: str, body: str) -> None:
        now = self.context.clock()
        store.annotations.add(
            Annotation(
                record_id=new_record_id(),
                path=path,
                author=self.context.bot.name,
                body_html=body,
                created_at=now,
                updated_at=now,
            )
        )

    def _update(self, store: AnnotationUnitOfWork, path: str, body: str) -> None:
        matched = store.annotations.update_body(
            path,
            author=self.context.bot.name,
            body_html=body,
            updated_at=self.context.clock(),
        )
        if matched == 0:
            raise PersistenceError(f"No annotation left to update at {path}")

    def _delete_orphan(self, store: AnnotationUnitOfWork, orphan: Annotation) -> Decision:
        log.info("Deleting orphaned annotation %s at %s", orphan.record_id, orphan.path)
        try:
            removed = store.annotations.delete(orphan.record_id)
            store.commit()
        except PersistenceError as exc:
            store.rollback()
            log.error(
                "Failed to delete annotation %s at %s: %s", orphan.record_id, orphan.path, exc
            )
            return Decision.skip(orphan.path, SkipReason.PERSISTENCE_FAILED, annotation=orphan)
        if not removed:
            log.info("Annotation %s was already gone", orphan.record_id)
        return Decision.delete(orphan)


def reconcile(
    context: ReconciliationContext,
    items: Iterable[ContentItem],
    *,
    unreadable: Sequence[str] = (),
) -> ReconciliationSummary:
    """Reconcile ``items`` against the stored annotations described by ``context``."""

    return ReconciliationEngine(context).reconcile(items, unreadable=unreadable)


__all__ = ["ReconciliationContext", "ReconciliationEngine", "reconcile", "render_body"]
