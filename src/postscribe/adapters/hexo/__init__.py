"""Public interface for the Hexo posts adapter."""

from __future__ import annotations

from .excerpts import FrontMatterExcerptWriter
from .posts import LoadedPosts, creation_time, load_post, load_posts
from .schema import FrontMatter

__all__ = [
    "FrontMatter",
    "FrontMatterExcerptWriter",
    "LoadedPosts",
    "creation_time",
    "load_post",
    "load_posts",
]
