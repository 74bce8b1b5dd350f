"""SQLAlchemy table metadata for the annotation (comment) store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Index,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from postscribe.config.storage import DEFAULT_ANNOTATION_TABLE

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def annotation_table(name: str = DEFAULT_ANNOTATION_TABLE) -> Table:
    """Return the table named ``name``, defining it on first use."""

    existing = metadata.tables.get(name)
    if existing is not None:
        return existing

    table = Table(
        name,
        metadata,
        Column("id", String(32), primary_key=True),
        Column("uid", String, nullable=True),
        Column("nick", String, nullable=False),
        Column("mail", String, nullable=False, default=""),
        Column("mail_md5", String, nullable=False, default=""),
        Column("link", String, nullable=True),
        Column("ua", String, nullable=True),
        Column("ip", String, nullable=True),
        Column("master", Boolean, nullable=False, default=False),
        Column("url", String, nullable=False),
        Column("href", String, nullable=True),
        Column("comment", Text, nullable=False),
        Column("pid", String, nullable=True),
        Column("rid", String, nullable=True),
        Column("is_spam", Boolean, nullable=True, default=False),
        Column("created", UTCDateTime(), nullable=True),
        Column("updated", UTCDateTime(), nullable=True),
    )
    Index(f"ix_{name}_url_nick", table.c.url, table.c.nick)
    return table


def create_annotation_table(engine: Engine, name: str = DEFAULT_ANNOTATION_TABLE) -> Table:
    table = annotation_table(name)
    table.create(engine, checkfirst=True)
    return table
