"""Logging setup for the command-line entry point.

Library modules only ever call ``logging.getLogger(__name__)``; installing
handlers is left to the process that embeds them.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """Route ``pricefeed`` log records to stderr through Rich.

    ``verbose`` lowers the threshold to DEBUG regardless of ``level``.
    Calling this twice replaces the previously installed handler.
    """
    logger = logging.getLogger("pricefeed")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level.upper())
