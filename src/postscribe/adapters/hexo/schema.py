"""Pydantic model for the front matter block of a Hexo post."""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, field_validator


class FrontMatter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    slug: str | None = None
    date: datetime | None = None
    updated: datetime | None = None
    draft: bool = False
    published: bool = True
    excerpt: str | None = None

    @field_validator("title", "slug", "excerpt", mode="before")
    @classmethod
    def _normalize_text(cls, value: object) -> object:
        # YAML reads bare values such as ``2024`` as numbers
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("date", "updated", mode="before")
    @classmethod
    def _normalize_dates(cls, value: object) -> object:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_draft(self) -> bool:
        return self.draft or not self.published
