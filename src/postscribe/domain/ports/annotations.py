"""Ports for reading and writing annotation records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from types import TracebackType

    from postscribe.domain.model import Annotation


@runtime_checkable
class AnnotationRepository(Protocol):
    """Persistence contract for annotation records.

    Reads raise ``StoreConnectionError`` when the store cannot be queried;
    writes raise ``PersistenceError``.
    """

    def list_by_author(self, author: str) -> Sequence[Annotation]:
        """Return root-level, non-spam annotations written by ``author``."""
        ...

    def count_at_path(self, path: str, *, author: str) -> int: ...

    def add(self, annotation: Annotation) -> None: ...

    def update_body(
        self,
        path: str,
        *,
        author: str,
        body_html: str,
        updated_at: datetime,
    ) -> int:
        """Rewrite the body of the author's annotations at ``path``; return the row count."""
        ...

    def delete(self, record_id: str) -> bool: ...


@runtime_checkable
class AnnotationUnitOfWork(Protocol):
    """Scoped connection to the annotation store.

    Entering connects (raising ``StoreConnectionError`` on failure), exiting
    always releases the connection.
    """

    @property
    def annotations(self) -> AnnotationRepository: ...

    def __enter__(self) -> AnnotationUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
