"""Shared logging helpers for postscribe."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(
    *,
    level: int | str = logging.INFO,
    log_file: str | Path | None = None,
    force: bool = False,
) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. ``log_file`` adds a
    second sink that receives the same records with full timestamps. Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=force,
    )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    log_file: Path | None = None


def get_logging_config() -> LoggingConfig:
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"Unknown log level {level!r}")
    log_file = os.getenv("LOG_FILE")
    return LoggingConfig(
        level=level,
        log_file=Path(log_file) if log_file and log_file.strip() else None,
    )
