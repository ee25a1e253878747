"""Logging setup shared by the command-line tools."""

from __future__ import annotations

import logging

from segmask.utils.settings import get_log_level


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger; level falls back to LOG_LEVEL."""
    level = level or get_log_level()
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
