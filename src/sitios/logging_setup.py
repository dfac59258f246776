"""Centralized logging configuration for Sitios."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "console"]

LOG_LEVEL_ENV = "SITIOS_LOG_LEVEL"

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

console = Console(stderr=True)

_handler: RichHandler | None = None


def _level_from(level_name: str | None) -> int:
    name = (level_name or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | None = None) -> None:
    """Route all logging through one Rich handler on the root logger.

    Safe to call more than once: later calls only change the level, so the
    CLI callback and the provisioning server can both call it.
    """
    global _handler

    root = logging.getLogger()
    if _handler is None or _handler not in root.handlers:
        for existing in list(root.handlers):
            root.removeHandler(existing)
        _handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        _handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(_handler)

    root.setLevel(_level_from(level_name))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.captureWarnings(True)
