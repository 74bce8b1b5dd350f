"""SQLAlchemy-backed unit of work scoping one connection to the annotation store."""

from __future__ import annotations

from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from postscribe.domain.errors import PersistenceError, StoreConnectionError

from .mappings import annotation_table
from .repositories import SqlAlchemyAnnotationRepository

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from postscribe.config.storage import DatabaseConfig
    from postscribe.domain.model import BotIdentity
    from postscribe.domain.ports.annotations import AnnotationUnitOfWork

log = getLogger(__name__)


class UnitOfWorkStateError(RuntimeError):
    """Raised when a unit of work is used outside its ``with`` block."""


def create_store_engine(config: DatabaseConfig) -> Engine:
    """Create (but do not connect) the engine for the configured store."""

    try:
        return create_engine(config.uri, future=True)
    except (SQLAlchemyError, ImportError, ValueError) as exc:
        raise StoreConnectionError(f"Invalid annotation store URI: {exc}") from exc


class SqlAlchemyAnnotationUnitOfWork:
    """Unit of work managing one SQLAlchemy session against the annotation table."""

    def __init__(
        self,
        engine: Engine,
        *,
        table_name: str | None = None,
        bot: BotIdentity | None = None,
        site_url: str = "",
    ) -> None:
        self.session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False
        )
        self.table = annotation_table(table_name) if table_name else annotation_table()
        self.bot = bot
        self.site_url = site_url
        self._session: Session | None = None
        self._annotations: SqlAlchemyAnnotationRepository | None = None

    def __enter__(self) -> SqlAlchemyAnnotationUnitOfWork:
        if self._session is not None:
            raise UnitOfWorkStateError("Unit of work session already initialised")
        session = self.session_factory()
        try:
            session.connection()
        except SQLAlchemyError as exc:
            session.close()
            raise StoreConnectionError(f"Could not connect to the annotation store: {exc}") from exc
        self._session = session
        self._annotations = SqlAlchemyAnnotationRepository(
            session, self.table, bot=self.bot, site_url=self.site_url
        )
        log.info("Annotation store connection established")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self._session = None
        self._annotations = None
        log.info("Annotation store connection closed")
        return False  # don't swallow exceptions

    @property
    def session(self) -> Session:
        if self._session is None:
            raise UnitOfWorkStateError("Unit of work session not initialised")
        return self._session

    @property
    def annotations(self) -> SqlAlchemyAnnotationRepository:
        if self._annotations is None:
            raise UnitOfWorkStateError("Unit of work session not initialised")
        return self._annotations

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.rollback()
            raise PersistenceError(f"Could not commit annotation changes: {exc}") from exc

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            log.exception("Rollback of the annotation session failed")


def unit_of_work_factory(
    engine: Engine,
    *,
    table_name: str | None = None,
    bot: BotIdentity | None = None,
    site_url: str = "",
) -> Callable[[], SqlAlchemyAnnotationUnitOfWork]:
    return partial(
        SqlAlchemyAnnotationUnitOfWork,
        engine,
        table_name=table_name,
        bot=bot,
        site_url=site_url,
    )



if TYPE_CHECKING:
    _uow_check: AnnotationUnitOfWork = SqlAlchemyAnnotationUnitOfWork(create_engine("sqlite://"))
