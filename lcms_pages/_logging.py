"""Logging setup for the ``pages`` command."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Send package log records to stderr at ``level``.

    Unknown level names fall back to ``WARNING``. Output goes to stderr so it
    never mixes with HTML or CSS written to stdout.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(log_level, int):
        log_level = logging.WARNING
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("lcms_pages").setLevel(log_level)


__all__ = ["configure_logging"]
