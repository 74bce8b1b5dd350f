"""SQLAlchemy adapter package for the annotation store."""

from __future__ import annotations

from .mappings import annotation_table, create_annotation_table, metadata
from .repositories import SqlAlchemyAnnotationRepository
from .unit_of_work import (
    SqlAlchemyAnnotationUnitOfWork,
    UnitOfWorkStateError,
    create_store_engine,
    unit_of_work_factory,
)

__all__ = [
    "SqlAlchemyAnnotationRepository",
    "SqlAlchemyAnnotationUnitOfWork",
    "UnitOfWorkStateError",
    "annotation_table",
    "create_annotation_table",
    "create_store_engine",
    "metadata",
    "unit_of_work_factory",
]
