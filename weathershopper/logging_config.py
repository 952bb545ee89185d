"""Logging setup shared by every Weather Shopper module."""

from __future__ import annotations

import logging
import os
import sys

_CONTEXT_FIELDS = ("stage", "category", "field", "url")
_CONFIGURED = False


class _ContextFormatter(logging.Formatter):
    """Append structured ``extra`` fields when a record carries them."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = [
            f"{name}={getattr(record, name)}"
            for name in _CONTEXT_FIELDS
            if getattr(record, name, None) not in (None, "")
        ]
        if not context:
            return base
        return f"{base} | {' '.join(context)}"


def _resolve_level() -> int:
    raw = (os.getenv("WEATHERSHOPPER_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | None = None) -> None:
    """Apply the package log level and install the console handler once.

    Without *level* the level is re-read from ``WEATHERSHOPPER_LOG_LEVEL``, so
    calling this again after ``load_dotenv`` picks up values from ``.env``.
    """

    global _CONFIGURED
    root = logging.getLogger("weathershopper")
    root.setLevel(_resolve_level() if level is None else level)
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        _ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.addHandler(handler)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    if not _CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
