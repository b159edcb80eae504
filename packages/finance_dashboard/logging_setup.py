"""Logging for the ``finance_dashboard`` package.

Library modules only ever call ``get_logger("finance_dashboard.<module>")``.
Until an entrypoint calls :func:`configure_logging` the package logger carries
a ``NullHandler`` and stays silent; the CLI configures it once at startup,
sending records to stderr so ``--json`` output on stdout stays parseable.

The level is taken from the ``level`` argument, then from the
``FINANCE_DASHBOARD_LOG_LEVEL`` environment variable, then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "finance_dashboard"
LEVEL_ENV = "FINANCE_DASHBOARD_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn an int, a digit string or a level name into a numeric level.

    Unknown names fall back to ``INFO`` rather than failing startup.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelNamesMapping().get(name)
    return value if value is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach one ``StreamHandler`` to the package logger; later calls are no-ops.

    Parameters
    ----------
    level:
        See :func:`resolve_level`.
    fmt:
        Record format, :data:`DEFAULT_FORMAT` when omitted.
    stream:
        Destination stream, ``sys.stderr`` by default.
    """

    global _configured
    if _configured:
        return

    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in pkg.handlers if isinstance(h, logging.NullHandler)]:
        pkg.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler.setLevel(resolved)
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    pkg.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["resolve_level", "configure_logging", "get_logger"]
