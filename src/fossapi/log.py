"""
Logging setup for the command-line and MCP entry points.

Library modules only create loggers; handlers are installed here. Logs go
to stderr so stdout stays clean for JSON output and the MCP stdio channel.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "fossapi"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Install a Rich handler on the package logger.

    Args:
        verbose: Log at DEBUG instead of WARNING.
        console: Console to log to (defaults to stderr).

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
