from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import OperationalError

from postscribe.adapters.sqlalchemy import SqlAlchemyAnnotationRepository, annotation_table
from postscribe.domain.errors import PersistenceError, StoreConnectionError
from tests.helpers.reconciliation import BASE_TIME, BOT, make_annotation

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session

    from postscribe.adapters.sqlalchemy import SqlAlchemyAnnotationUnitOfWork

PATH = "/2024/03/05/hello-world/"


def _insert_raw(engine: Engine, **values: object) -> None:
    row: dict[str, object] = {
        "id": "f" * 32,
        "nick": "Alice",
        "url": PATH,
        "comment": "<p>Nice post!</p>",
        "created": BASE_TIME,
        "updated": BASE_TIME,
    }
    row.update(values)
    with engine.begin() as connection:
        connection.execute(insert(annotation_table()).values(**row))


def test_add_writes_bot_profile_columns(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    annotation = make_annotation(PATH, body_html="<p>Summary</p>")

    with sqlite_unit_of_work() as uow:
        uow.annotations.add(annotation)
        uow.commit()

    with sqlite_engine.connect() as connection:
        row = connection.execute(select(annotation_table())).one()._mapping  # noqa: SLF001

    assert row["id"] == annotation.record_id
    assert row["nick"] == BOT.name
    assert row["uid"] == BOT.uid
    assert row["link"] == BOT.link
    assert row["ua"] == BOT.user_agent
    assert row["ip"] == "127.0.0.1"
    assert row["href"] == f"https://blog.example{PATH}"
    assert row["comment"] == "<p>Summary</p>"
    assert row["rid"] is None
    assert not row["master"]


def test_list_by_author_filters_humans_replies_and_spam(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _insert_raw(sqlite_engine, id="1" * 32)
    _insert_raw(sqlite_engine, id="2" * 32, nick=BOT.name, rid="1" * 32)
    _insert_raw(sqlite_engine, id="3" * 32, nick=BOT.name, is_spam=True)
    _insert_raw(sqlite_engine, id="4" * 32, nick=BOT.name, rid="", is_spam=None)

    with sqlite_unit_of_work() as uow:
        found = uow.annotations.list_by_author(BOT.name)

    assert [annotation.record_id for annotation in found] == ["4" * 32]
    assert found[0].updated_at == BASE_TIME
    assert found[0].is_authored_by(BOT.name)


def test_list_by_author_tolerates_missing_timestamps(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _insert_raw(sqlite_engine, nick=BOT.name, updated=None)

    with sqlite_unit_of_work() as uow:
        [found] = uow.annotations.list_by_author(BOT.name)

    assert found.updated_at == BASE_TIME


def test_count_at_path_counts_only_bot_annotations(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _insert_raw(sqlite_engine)

    with sqlite_unit_of_work() as uow:
        assert uow.annotations.count_at_path(PATH, author=BOT.name) == 0
        uow.annotations.add(make_annotation(PATH))
        assert uow.annotations.count_at_path(PATH, author=BOT.name) == 1
        assert uow.annotations.count_at_path("/other/", author=BOT.name) == 0


def test_update_body_touches_only_bot_annotation(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _insert_raw(sqlite_engine)
    original = make_annotation(PATH)
    later = BASE_TIME + timedelta(hours=2)

    with sqlite_unit_of_work() as uow:
        uow.annotations.add(original)
        matched = uow.annotations.update_body(
            PATH, author=BOT.name, body_html="<p>New</p>", updated_at=later
        )
        uow.commit()

    assert matched == 1
    with sqlite_unit_of_work() as uow:
        [stored] = uow.annotations.list_by_author(BOT.name)
        assert uow.annotations.update_body(
            "/missing/", author=BOT.name, body_html="<p>x</p>", updated_at=later
        ) == 0

    assert stored.record_id == original.record_id
    assert stored.body_html == "<p>New</p>"
    assert stored.updated_at == later
    assert stored.created_at == original.created_at


def test_delete_removes_exactly_one_record(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    _insert_raw(sqlite_engine)
    first = make_annotation(PATH)
    second = make_annotation(PATH)

    with sqlite_unit_of_work() as uow:
        uow.annotations.add(first)
        uow.annotations.add(second)
        assert uow.annotations.delete(first.record_id) is True
        assert uow.annotations.delete(first.record_id) is False
        uow.commit()

    with sqlite_engine.connect() as connection:
        remaining = set(connection.execute(select(annotation_table().c.id)).scalars())

    assert remaining == {"f" * 32, second.record_id}


def test_duplicate_record_id_raises_persistence_error(
    sqlite_unit_of_work: Callable[[], SqlAlchemyAnnotationUnitOfWork],
) -> None:
    annotation = make_annotation(PATH)

    with sqlite_unit_of_work() as uow:
        uow.annotations.add(annotation)
        with pytest.raises(PersistenceError):
            uow.annotations.add(annotation)


class _BrokenSession:
    def execute(self, statement: object) -> object:
        raise OperationalError(str(statement), {}, Exception("database is locked"))


def test_read_errors_surface_as_connection_errors() -> None:
    session: Session = _BrokenSession()  # type: ignore[assignment]
    repository = SqlAlchemyAnnotationRepository(session, annotation_table(), bot=BOT)

    with pytest.raises(StoreConnectionError):
        repository.list_by_author(BOT.name)
    with pytest.raises(StoreConnectionError):
        repository.count_at_path(PATH, author=BOT.name)
    with pytest.raises(PersistenceError):
        repository.delete("x")
