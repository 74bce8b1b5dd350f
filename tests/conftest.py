from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from postscribe.adapters.sqlalchemy import (
    SqlAlchemyAnnotationUnitOfWork,
    create_annotation_table,
    unit_of_work_factory,
)
from tests.helpers.reconciliation import BOT

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_annotation_table(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Callable[[], SqlAlchemyAnnotationUnitOfWork]:
    return unit_of_work_factory(sqlite_engine, bot=BOT, site_url="https://blog.example")
