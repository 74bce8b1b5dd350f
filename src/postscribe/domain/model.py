"""Domain records exchanged between the content source, the store and the engine."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path


@dataclass(frozen=True, slots=True, kw_only=True)
class ContentItem:
    """One published unit of content as handed over by the site generator."""

    id: str
    title: str
    slug: str | None
    publish_date: datetime
    updated_at: datetime
    raw_text: str
    is_draft: bool = False
    source_path: Path | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Annotation:
    """A stored comment record attached to a content item by canonical path."""

    record_id: str
    path: str
    author: str
    body_html: str
    created_at: datetime
    updated_at: datetime
    is_root_level: bool = True
    is_spam: bool = False

    def is_authored_by(self, author: str) -> bool:
        return self.is_root_level and self.author == author and not self.is_spam


@dataclass(frozen=True, slots=True)
class BotIdentity:
    """Author profile stamped on annotations written by the engine."""

    name: str = "DeepSeek"
    uid: str = "deepseek-bot"
    link: str = "https://www.deepseek.com/"
    user_agent: str = "DeepSeek Bot/1.0"


def new_record_id() -> str:
    """Return a fresh 32-character hex record identifier."""

    return uuid.uuid4().hex


__all__ = ["Annotation", "BotIdentity", "ContentItem", "new_record_id"]
