"""Port for producing short synopses of content text."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Summarizer(Protocol):
    """Callable port returning a plain-prose synopsis or raising ``SummarizationError``."""

    def __call__(self, text: str) -> str: ...


__all__ = ["Summarizer"]
