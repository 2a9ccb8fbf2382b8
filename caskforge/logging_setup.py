"""Logging configuration for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED_ATTR = "_caskforge_configured"


def configure_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    """Send all ``caskforge`` log records through a Rich handler on stderr.

    Safe to call more than once; only the level changes on later calls.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    if getattr(root, _CONFIGURED_ATTR, False):
        return

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    setattr(root, _CONFIGURED_ATTR, True)
