"""Failure taxonomy for a reconciliation pass.

Only :class:`StoreConnectionError` is fatal to a pass. Every other error is
scoped to the item being processed and is recovered as a skip.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for reconciliation failures."""


class StoreConnectionError(ReconciliationError):
    """Raised when the annotation store cannot be reached or read."""


class SummarizationError(ReconciliationError):
    """Raised when the summarizer cannot produce a synopsis for an item."""


class PersistenceError(ReconciliationError):
    """Raised when writing an annotation or an excerpt fails."""


class MissingMetadataError(PersistenceError):
    """Raised when an item has no metadata record to persist its excerpt into."""


__all__ = [
    "MissingMetadataError",
    "PersistenceError",
    "ReconciliationError",
    "StoreConnectionError",
    "SummarizationError",
]
