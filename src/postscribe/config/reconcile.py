"""Reconciliation pass configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from postscribe.domain.identity import SlugFallback
from postscribe.domain.model import BotIdentity
from postscribe.domain.reconciliation.contracts import (
    DEFAULT_UPDATE_THRESHOLD,
    ReconcileMode,
    ReconcileSettings,
)

from .env import int_env_var, optional_env_var
from .errors import ConfigurationError

DEFAULT_POSTS_DIR = "./source/_posts"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    posts_dir: Path
    settings: ReconcileSettings = field(default_factory=ReconcileSettings)
    bot: BotIdentity = field(default_factory=BotIdentity)
    site_url: str = ""
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))


def parse_mode(value: str) -> ReconcileMode:
    try:
        return ReconcileMode(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in ReconcileMode)
        raise ConfigurationError(f"Unknown reconcile mode {value!r} (expected {choices})") from exc


def parse_slug_fallback(value: str) -> SlugFallback:
    try:
        return SlugFallback(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(fallback.value for fallback in SlugFallback)
        raise ConfigurationError(f"Unknown slug fallback {value!r} (expected {choices})") from exc


def parse_timezone(value: str) -> ZoneInfo:
    try:
        return ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {value!r}") from exc


def get_bot_identity() -> BotIdentity:
    defaults = BotIdentity()
    return BotIdentity(
        name=optional_env_var("BOT_NAME", defaults.name),
        uid=optional_env_var("BOT_UID", defaults.uid),
        link=optional_env_var("BOT_LINK", defaults.link),
        user_agent=optional_env_var("BOT_UA", defaults.user_agent),
    )


def get_reconcile_config(
    *,
    posts_dir: Path | None = None,
    mode: ReconcileMode | None = None,
    update_threshold: timedelta | None = None,
) -> ReconcileConfig:
    threshold_ms = int_env_var(
        "UPDATE_THRESHOLD_MS",
        int(DEFAULT_UPDATE_THRESHOLD / timedelta(milliseconds=1)),
    )
    if threshold_ms < 0:
        raise ConfigurationError("UPDATE_THRESHOLD_MS must be non-negative")

    if update_threshold is None:
        update_threshold = timedelta(milliseconds=threshold_ms)
    settings = ReconcileSettings(
        update_threshold=update_threshold,
        mode=mode or parse_mode(optional_env_var("RECONCILE_MODE", ReconcileMode.FULL)),
        slug_fallback=parse_slug_fallback(optional_env_var("SLUG_FALLBACK", SlugFallback.FILENAME)),
    )
    return ReconcileConfig(
        posts_dir=posts_dir or Path(optional_env_var("POSTS_DIR", DEFAULT_POSTS_DIR)),
        settings=settings,
        bot=get_bot_identity(),
        site_url=optional_env_var("SITE_URL", "").rstrip("/"),
        timezone=parse_timezone(optional_env_var("SITE_TIMEZONE", "UTC")),
    )
