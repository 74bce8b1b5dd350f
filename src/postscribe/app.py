"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import ExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from postscribe.adapters.deepseek import DeepSeekSummarizer
from postscribe.adapters.hexo import FrontMatterExcerptWriter, load_posts
from postscribe.adapters.sqlalchemy import (
    create_annotation_table,
    create_store_engine,
    unit_of_work_factory,
)
from postscribe.config import get_database_config, get_summarizer_config
from postscribe.config.reconcile import get_reconcile_config
from postscribe.domain.clock import Clock, utcnow
from postscribe.domain.errors import StoreConnectionError
from postscribe.domain.reconciliation import ReconciliationContext, reconcile

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import timedelta
    from pathlib import Path

    from postscribe.config.storage import DatabaseConfig
    from postscribe.domain.model import ContentItem
    from postscribe.domain.ports import AnnotationUnitOfWork, ExcerptWriter, Summarizer
    from postscribe.domain.reconciliation import ReconcileMode, ReconciliationSummary

type UnitOfWorkFactory = Callable[[], AnnotationUnitOfWork]


log = getLogger(__name__)


def reconcile_posts(
    *,
    posts_dir: Path | None = None,
    mode: ReconcileMode | None = None,
    update_threshold: timedelta | None = None,
    items: Iterable[ContentItem] | None = None,
    summarizer: Summarizer | None = None,
    excerpts: ExcerptWriter | None = None,
    store_factory: UnitOfWorkFactory | None = None,
    database: DatabaseConfig | None = None,
    clock: Clock = utcnow,
) -> ReconciliationSummary:
    """Run one reconciliation pass using the configured adapters."""

    config = get_reconcile_config(posts_dir=posts_dir, mode=mode, update_threshold=update_threshold)
    unreadable: list[str] = []
    if items is not None:
        content = list(items)
    else:
        loaded = load_posts(config.posts_dir, timezone=config.timezone)
        content = loaded.items
        unreadable = [path.as_posix() for path in loaded.rejected]

    with ExitStack() as resources:
        store = store_factory
        if store is None:
            database_config = database or get_database_config()
            engine = create_store_engine(database_config)
            resources.callback(engine.dispose)
            store = unit_of_work_factory(
                engine,
                table_name=database_config.annotation_table,
                bot=config.bot,
                site_url=config.site_url,
            )
        if summarizer is None:
            summarizer = resources.enter_context(DeepSeekSummarizer(get_summarizer_config()))

        context = ReconciliationContext(
            store=store,
            summarizer=summarizer,
            excerpts=excerpts or FrontMatterExcerptWriter(),
            bot=config.bot,
            settings=config.settings,
            clock=clock,
        )
        log.info(
            "Starting reconciliation: items=%s, mode=%s, threshold=%s, bot=%s",
            len(content),
            config.settings.mode,
            config.settings.update_threshold,
            config.bot.name,
        )
        return reconcile(context, content, unreadable=unreadable)


def initialise_store(*, database: DatabaseConfig | None = None) -> str:
    """Create the annotation table if it does not exist yet; return its name."""

    database_config = database or get_database_config()
    engine = create_store_engine(database_config)
    try:
        table = create_annotation_table(engine, database_config.annotation_table)
    except SQLAlchemyError as exc:
        raise StoreConnectionError(f"Could not create the annotation table: {exc}") from exc
    finally:
        engine.dispose()
    log.info("Annotation table %s is ready", table.name)
    return table.name
