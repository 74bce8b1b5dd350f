from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect, select

from postscribe.adapters.hexo import posts as posts_module
from postscribe.adapters.sqlalchemy import annotation_table
from postscribe.app import initialise_store, reconcile_posts
from postscribe.config.storage import DatabaseConfig
from postscribe.domain.reconciliation import ReconcileMode
from tests.helpers.reconciliation import BOT, FakeSummarizer

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from postscribe.adapters.sqlalchemy import SqlAlchemyAnnotationUnitOfWork

NOW = datetime(2024, 4, 1, tzinfo=UTC)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "UPDATE_THRESHOLD_MS",
        "RECONCILE_MODE",
        "SLUG_FALLBACK",
        "POSTS_DIR",
        "SITE_URL",
        "SITE_TIMEZONE",
        "BOT_NAME",
    ):
        monkeypatch.delenv(name, raising=False)


def _write_post(posts_dir: Path, name: str, slug: str, *, updated: str) -> Path:
    path = posts_dir / f"{name}.md"
    path.write_text(
        f"---\ntitle: {name}\nslug: {slug}\ndate: 2024-03-05 10:00:00\nupdated: {updated}\n---\n"
        f"Text of {name}.\n",
        encoding="utf-8",
    )
    return path


def _stored_paths(engine: Engine) -> list[str]:
    table = annotation_table()
    with engine.connect() as connection:
        return sorted(connection.execute(select(table.c.url)).scalars())


def test_reconcile_posts_full_lifecycle(
    tmp_path: Path,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    first = _write_post(tmp_path, "first", "hello-世界", updated="2024-03-05 10:00:00")
    second = _write_post(tmp_path, "second", "second-post", updated="2024-03-05 11:00:00")
    summarizer = FakeSummarizer("A short synopsis.")

    def run() -> tuple[int, int, int, int]:
        summary = reconcile_posts(
            posts_dir=tmp_path,
            summarizer=summarizer,
            store_factory=sqlite_unit_of_work,
            clock=lambda: NOW,
        )
        return summary.created, summary.updated, summary.skipped, summary.deleted

    assert run() == (2, 0, 0, 0)
    assert _stored_paths(sqlite_engine) == [
        "/2024/03/05/hello-%E4%B8%96%E7%95%8C/",
        "/2024/03/05/second-post/",
    ]
    assert "excerpt: A short synopsis." in first.read_text(encoding="utf-8")
    assert "excerpt: A short synopsis." in second.read_text(encoding="utf-8")

    assert run() == (0, 0, 2, 0)
    assert len(summarizer.calls) == 2

    second.unlink()
    assert run() == (0, 0, 1, 1)
    assert _stored_paths(sqlite_engine) == ["/2024/03/05/hello-%E4%B8%96%E7%95%8C/"]


def test_reconcile_posts_regenerates_after_edit(
    tmp_path: Path,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _write_post(tmp_path, "post", "post", updated="2024-03-05 10:00:00")
    reconcile_posts(
        posts_dir=tmp_path,
        summarizer=FakeSummarizer("Old take."),
        store_factory=sqlite_unit_of_work,
        clock=lambda: NOW,
    )
    _write_post(tmp_path, "post", "post", updated="2024-05-01 00:00:00")

    summary = reconcile_posts(
        posts_dir=tmp_path,
        summarizer=FakeSummarizer("New take."),
        store_factory=sqlite_unit_of_work,
        clock=lambda: NOW,
    )

    assert summary.updated == 1
    table = annotation_table()
    with sqlite_engine.connect() as connection:
        bodies = list(connection.execute(select(table.c.comment)).scalars())
    assert bodies == ["<p>New take.</p>"]


def test_reconcile_posts_create_only_leaves_orphans(
    tmp_path: Path,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    gone = _write_post(tmp_path, "gone", "gone", updated="2024-03-05 10:00:00")
    reconcile_posts(
        posts_dir=tmp_path,
        summarizer=FakeSummarizer(),
        store_factory=sqlite_unit_of_work,
        clock=lambda: NOW,
    )
    gone.unlink()

    summary = reconcile_posts(
        posts_dir=tmp_path,
        mode=ReconcileMode.CREATE_ONLY,
        summarizer=FakeSummarizer(),
        store_factory=sqlite_unit_of_work,
    )

    assert summary.deleted == 0
    assert _stored_paths(sqlite_engine) == ["/2024/03/05/gone/"]


def test_reconcile_posts_uses_configured_database(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    posts = tmp_path / "posts"
    posts.mkdir()
    _write_post(posts, "post", "post", updated="2024-03-05 10:00:00")
    monkeypatch.setenv("SITE_URL", "https://blog.example/")
    database = DatabaseConfig(uri=f"sqlite+pysqlite:///{tmp_path / 'store.db'}")
    initialise_store(database=database)

    summary = reconcile_posts(posts_dir=posts, summarizer=FakeSummarizer(), database=database)

    assert summary.created == 1
    engine = create_engine(database.uri)
    try:
        with engine.connect() as connection:
            row = connection.execute(select(annotation_table())).one()._mapping  # noqa: SLF001
    finally:
        engine.dispose()
    assert row["nick"] == BOT.name
    assert row["href"] == "https://blog.example/2024/03/05/post/"


def test_initialise_store_creates_named_table(tmp_path: Path) -> None:
    database = DatabaseConfig(
        uri=f"sqlite+pysqlite:///{tmp_path / 'waline.db'}",
        annotation_table="wl_Comment",
    )

    assert initialise_store(database=database) == "wl_Comment"
    assert initialise_store(database=database) == "wl_Comment"

    engine = create_engine(database.uri)
    try:
        assert "wl_Comment" in inspect(engine).get_table_names()
    finally:
        engine.dispose()


def test_reconcile_posts_keeps_annotations_while_a_post_is_unreadable(
    tmp_path: Path,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    typo = _write_post(tmp_path, "typo", "typo", updated="2024-03-05 10:00:00")
    gone = _write_post(tmp_path, "gone", "gone", updated="2024-03-05 10:00:00")

    def run() -> int:
        summary = reconcile_posts(
            posts_dir=tmp_path,
            summarizer=FakeSummarizer(),
            store_factory=sqlite_unit_of_work,
            clock=lambda: NOW,
        )
        return summary.deleted

    run()
    gone.unlink()
    valid = typo.read_text(encoding="utf-8")
    typo.write_text(valid.replace("slug: typo\n", "slug: typo\ndraft: maybe\n"), encoding="utf-8")

    assert run() == 0
    assert _stored_paths(sqlite_engine) == ["/2024/03/05/gone/", "/2024/03/05/typo/"]

    typo.write_text(valid, encoding="utf-8")

    assert run() == 1
    assert _stored_paths(sqlite_engine) == ["/2024/03/05/typo/"]


def test_reconcile_posts_updates_undated_post_in_place(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    created = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
    monkeypatch.setattr(posts_module, "creation_time", lambda stat: created)
    post = tmp_path / "note.md"
    post.write_text("---\ntitle: Note\n---\nFirst draft.\n", encoding="utf-8")
    os.utime(post, (created.timestamp(), created.timestamp()))

    first = reconcile_posts(
        posts_dir=tmp_path,
        summarizer=FakeSummarizer(),
        store_factory=sqlite_unit_of_work,
        clock=lambda: NOW,
    )
    edited = datetime(2024, 6, 1, tzinfo=UTC).timestamp()
    os.utime(post, (edited, edited))
    second = reconcile_posts(
        posts_dir=tmp_path,
        summarizer=FakeSummarizer("Revised."),
        store_factory=sqlite_unit_of_work,
        clock=lambda: NOW,
    )

    assert first.created == 1
    assert (second.updated, second.created, second.deleted) == (1, 0, 0)
    assert _stored_paths(sqlite_engine) == ["/2024/01/01/note/"]
