# listing_extractor/logs.py
"""
Logging helpers.

Library modules log through `logging.getLogger(__name__)` and never install
handlers. Setting LISTING_EXTRACT_DEBUG=1 additionally mirrors the package's
records into a rotating file under logs/ for post-mortem debugging.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from urllib.parse import urlsplit, urlunsplit

_PACKAGE_LOGGER = "listing_extractor"
_DEBUG_LOG_PATH = os.path.join("logs", "listing_extract.log")

_DEBUG_LOGGER: logging.Logger | None = None


def debug_enabled() -> bool:
    return os.getenv("LISTING_EXTRACT_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def get_debug_logger() -> logging.Logger:
    """Create/reuse the package logger with a rotating file handler attached."""
    global _DEBUG_LOGGER
    if _DEBUG_LOGGER is not None:
        return _DEBUG_LOGGER

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if reloaded in REPL/tests
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        try:
            os.makedirs(os.path.dirname(_DEBUG_LOG_PATH), exist_ok=True)
            handler = RotatingFileHandler(_DEBUG_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                    datefmt="(%Y-%m-%d %H:%M:%S)",
                )
            )
            logger.addHandler(handler)
        except OSError:
            # An unwritable log directory must not break extraction.
            pass

    _DEBUG_LOGGER = logger
    return logger


def setup_logging() -> None:
    """Opt-in file logging for CLI runs; a no-op unless LISTING_EXTRACT_DEBUG is set."""
    if debug_enabled():
        get_debug_logger()


def redact_url(url: str) -> str:
    """Drop query string and fragment; listing links sometimes carry session tokens."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<unparseable url>"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


__all__ = ["debug_enabled", "get_debug_logger", "setup_logging", "redact_url"]
