"""Logging for the ``ledger_ingest`` package.

Only entrypoints configure output. ``configure_logging`` installs one stream
handler on the ``"ledger_ingest"`` logger the first time it is called; every
other module asks ``get_logger("ledger_ingest.<module>")`` for a named logger
and never touches handlers. Until configuration happens the package logger
carries a ``NullHandler`` so importing the library stays silent.

Environment
-----------
``LEDGER_LOG_LEVEL``
    Level name or number used when no explicit level is passed.
``LEDGER_LOG_FORMAT``
    ``logging.Formatter`` format string overriding the default.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "ledger_ingest"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``LEDGER_LOG_LEVEL`` when ``None``) into a number.

    Unknown names fall back to ``INFO``.
    """

    if level is None:
        level = os.getenv("LEDGER_LOG_LEVEL") or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach the package's single ``StreamHandler`` and return the package logger.

    Parameters
    ----------
    level:
        Level for both logger and handler; see :func:`resolve_level`.
    fmt:
        Format string; defaults to ``LEDGER_LOG_FORMAT`` or
        :data:`DEFAULT_FORMAT`.
    stream:
        Destination; ``sys.stderr`` as seen at call time when omitted.

    Repeated calls are no-ops so nested entrypoints cannot stack handlers.
    """

    global _configured
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured:
        return logger

    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or os.getenv("LEDGER_LOG_FORMAT") or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["PACKAGE_LOGGER", "DEFAULT_FORMAT", "resolve_level", "configure_logging", "get_logger"]
