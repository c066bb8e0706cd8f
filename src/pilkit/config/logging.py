"""Root logger setup for the command line entry point."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "PILKIT_LOG_LEVEL"


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``level`` falls back to ``PILKIT_LOG_LEVEL`` and then to INFO. httpx logs a
    line per request, so it is held at WARNING to keep receipt polling quiet.
    """

    resolved = level if level is not None else os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
