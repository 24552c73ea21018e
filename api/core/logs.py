"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; this only makes sure the
records go somewhere when the ASGI server has not configured logging itself.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def configure_logging() -> None:
    root = logging.getLogger()
    level = logging.getLevelName(log_level())
    if not isinstance(level, int):
        level = logging.INFO

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
