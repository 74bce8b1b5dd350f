"""Persist summaries into the ``excerpt`` field of a post's front matter."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import yaml
from frontmatter.default_handlers import YAMLHandler

from postscribe.domain.errors import MissingMetadataError, PersistenceError
from postscribe.domain.ports.excerpts import ExcerptWriter

if TYPE_CHECKING:
    from pathlib import Path

    from postscribe.domain.model import ContentItem

log = getLogger(__name__)

EXCERPT_FIELD = "excerpt"
DELIMITER = "---"
# delimiter line only; its line ending stays with the body
_BOUNDARY = re.compile(r"^-{3,}[ \t]*(?=\r?$)", re.MULTILINE)


@dataclass(slots=True)
class FrontMatterExcerptWriter:
    """Rewrites one front matter key; other keys keep their order and the body its bytes."""

    field_name: str = EXCERPT_FIELD
    handler: YAMLHandler = field(default_factory=YAMLHandler)

    def has_metadata(self, item: ContentItem) -> bool:
        return item.source_path is not None and item.source_path.is_file()

    def write_excerpt(self, item: ContentItem, excerpt: str) -> None:
        path = item.source_path
        if path is None or not path.is_file():
            raise MissingMetadataError(f"No source file for {item.title!r} ({item.id})")

        try:
            with path.open(encoding="utf-8", newline="") as handle:
                original = handle.read()
            _replace_file(path, self.render(original, excerpt))
        except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as exc:
            raise PersistenceError(f"Could not write excerpt to {path}: {exc}") from exc

        log.debug("Wrote %s for %r to %s", self.field_name, item.title, path)

    def render(self, document: str, excerpt: str) -> str:
        """Return ``document`` with the excerpt field set, keeping its line endings."""

        newline = "\r\n" if "\r\n" in document else "\n"
        parts = _BOUNDARY.split(document, 2) if _BOUNDARY.match(document) else []
        if len(parts) == 3:
            _, front, body = parts
            loaded = self.handler.load(front)
            if loaded is not None and not isinstance(loaded, dict):
                raise ValueError("front matter is not a mapping")
            metadata: dict[str, Any] = dict(loaded or {})
        else:
            metadata, body = {}, newline + document

        metadata[self.field_name] = excerpt
        exported = self.handler.export(metadata, sort_keys=False).replace("\n", newline)
        return f"{DELIMITER}{newline}{exported}{newline}{DELIMITER}{body}"


def _replace_file(path: Path, content: str) -> None:
    staging = path.with_name(f".{path.name}.tmp")
    try:
        staging.write_text(content, encoding="utf-8", newline="")
        staging.replace(path)
    finally:
        staging.unlink(missing_ok=True)


if TYPE_CHECKING:
    _writer_check: ExcerptWriter = FrontMatterExcerptWriter()
