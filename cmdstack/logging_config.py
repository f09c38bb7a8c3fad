"""Logging setup shared by the CLI and the API."""

from __future__ import annotations

import logging
import os

from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "CMDSTACK_LOG_LEVEL"


def setup_logging(level: str | None = None) -> None:
    """Route ``cmdstack.*`` loggers through a rich handler.

    The level comes from ``level``, then ``$CMDSTACK_LOG_LEVEL``, then WARNING.
    Calling this more than once only updates the level.
    """
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "WARNING").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    logger = logging.getLogger("cmdstack")
    logger.setLevel(resolved)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
