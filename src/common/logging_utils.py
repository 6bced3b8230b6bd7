"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module owns the
root handler setup plus the small helpers used to emit structured DEBUG events.
"""
from __future__ import annotations

import logging
import os
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_SENSITIVE_QUERY_KEYS = ("token", "key", "secret", "password", "apikey", "api_key", "sig")


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    Level precedence: explicit argument, then ``NUGETCHECK_LOG_LEVEL``, then INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(stream)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        root.addHandler(file_handler)

    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


def safe_url(url: str) -> str:
    """Strip userinfo and sensitive query parameters from a URL before logging it."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
    cleaned = [
        (k, "***" if k.lower() in _SENSITIVE_QUERY_KEYS else v) for k, v in query
    ]
    return urllib.parse.urlunsplit(
        (parts.scheme, netloc, parts.path, urllib.parse.urlencode(cleaned), "")
    )


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
