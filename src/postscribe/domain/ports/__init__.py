"""Domain port definitions for adapters."""

from __future__ import annotations

from .annotations import AnnotationRepository, AnnotationUnitOfWork
from .excerpts import ExcerptWriter
from .summarizing import Summarizer

__all__ = [
    "AnnotationRepository",
    "AnnotationUnitOfWork",
    "ExcerptWriter",
    "Summarizer",
]
