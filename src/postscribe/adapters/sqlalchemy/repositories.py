"""Repository implementation backed by a SQLAlchemy session."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy import delete, false, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from postscribe.domain.errors import PersistenceError, StoreConnectionError
from postscribe.domain.model import Annotation, BotIdentity

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Row, Table
    from sqlalchemy.orm import Session

log = getLogger(__name__)

LOCAL_IP: Final[str] = "127.0.0.1"
_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)


class SqlAlchemyAnnotationRepository:
    def __init__(
        self,
        session: Session,
        table: Table,
        *,
        bot: BotIdentity | None = None,
        site_url: str = "",
    ) -> None:
        self.session = session
        self.table = table
        self.bot = bot or BotIdentity()
        self.site_url = site_url.rstrip("/")

    def list_by_author(self, author: str) -> list[Annotation]:
        stmt = select(self.table).where(*self._authored_by(author))
        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreConnectionError(f"Could not query annotations: {exc}") from exc
        return [self._to_annotation(row) for row in rows]

    def count_at_path(self, path: str, *, author: str) -> int:
        stmt = (
            select(func.count())
            .select_from(self.table)
            .where(self.table.c.url == path, *self._authored_by(author))
        )
        try:
            return int(self.session.execute(stmt).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreConnectionError(f"Could not count annotations at {path}: {exc}") from exc

    def add(self, annotation: Annotation) -> None:
        stmt = insert(self.table).values(
            id=annotation.record_id,
            uid=self.bot.uid,
            nick=annotation.author,
            mail="",
            mail_md5="",
            link=self.bot.link,
            ua=self.bot.user_agent,
            ip=LOCAL_IP,
            master=False,
            url=annotation.path,
            href=f"{self.site_url}{annotation.path}",
            comment=annotation.body_html,
            pid=None,
            rid=None,
            is_spam=annotation.is_spam,
            created=annotation.created_at,
            updated=annotation.updated_at,
        )
        try:
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            message = f"Could not insert annotation at {annotation.path}: {exc}"
            raise PersistenceError(message) from exc

    def update_body(
        self,
        path: str,
        *,
        author: str,
        body_html: str,
        updated_at: datetime,
    ) -> int:
        stmt = (
            update(self.table)
            .where(self.table.c.url == path, *self._authored_by(author))
            .values(comment=body_html, updated=updated_at)
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not update annotation at {path}: {exc}") from exc
        return result.rowcount

    def delete(self, record_id: str) -> bool:
        stmt = delete(self.table).where(self.table.c.id == record_id)
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete annotation {record_id}: {exc}") from exc
        return result.rowcount > 0

    def _authored_by(self, author: str) -> tuple[ColumnElement[bool], ...]:
        columns = self.table.c
        return (
            columns.nick == author,
            or_(columns.rid.is_(None), columns.rid == ""),
            or_(columns.is_spam.is_(None), columns.is_spam == false()),
        )

    def _to_annotation(self, row: Row[tuple[object, ...]]) -> Annotation:
        data = row._mapping  # noqa: SLF001
        created = data["created"] or data["updated"] or _EPOCH
        updated = data["updated"] or created
        if data["updated"] is None:
            log.warning("Annotation %s at %s has no update timestamp", data["id"], data["url"])
        return Annotation(
            record_id=str(data["id"]),
            path=str(data["url"]),
            author=str(data["nick"]),
            body_html=str(data["comment"] or ""),
            created_at=created,
            updated_at=updated,
            is_root_level=not data["rid"],
            is_spam=bool(data["is_spam"]),
        )

