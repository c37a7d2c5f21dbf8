"""
Logging for the storefront package.

Usage:
    from storefront.logging import get_logger, get_session_logger
    logger = get_logger(__name__)
    session_logger = get_session_logger(__name__, session_id)

    session_logger.info("Cart saved")   # "[cart a1b2c3d4] Cart saved"

Handlers are attached to the "storefront" logger only, so an embedding app
keeps control of the root logger. configure_logging() runs on import and can
be called again by the app entry point to change the level.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

PACKAGE_LOGGER = "storefront"

_handler: logging.Handler | None = None


def _level_from_env() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """
    Attach a stdout handler to the package logger (once) and set its level.

    Args:
        level: logging level or name; LOG_LEVEL env var when omitted

    Returns:
        The package logger
    """
    global _handler

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if level is None:
        level = _level_from_env()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        # Vercel adds its own timestamps
        is_production = os.environ.get("VERCEL") == "1"
        _handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if is_production else LOG_FORMAT))
        package_logger.addHandler(_handler)
        # Upstash talks REST over httpx; its per-request lines are noise
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    return package_logger


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Get a logger; use __name__ so it falls under the package logger."""
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Make a client-supplied identifier safe to log (CWE-117).

    Session and product ids come straight from requests: control characters
    are escaped and the value is cut to its first 8 characters.
    """
    if not id_value:
        return "N/A"
    safe_value = (
        str(id_value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    return safe_value[:8]


class SessionLogger(logging.LoggerAdapter):
    """Prefixes every message with the (sanitized) cart session id."""

    def process(self, msg, kwargs):
        return f"[cart {self.extra['session']}] {msg}", kwargs


def get_session_logger(name: str, session_id: str | None) -> SessionLogger:
    return SessionLogger(get_logger(name), {"session": sanitize_id_for_logging(session_id)})


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "get_session_logger",
    "sanitize_id_for_logging",
]
