"""Logging configuration module."""

from __future__ import annotations

import logging

from imagelab.config.settings import get_settings

# Chatty third-party loggers that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "PIL")


def configure_logging() -> None:
    """Configure root logger and quieten per-request client logs."""

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
