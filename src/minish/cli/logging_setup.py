"""Logging configuration for the ``minish`` command.

The library modules only create loggers; handlers are attached here,
once, by the CLI.  Records go to stderr through Rich's handler so they
stay out of the shell's stdout stream.
"""

from __future__ import annotations

import logging
import sys

from minish.cli.console import get_rich_console
from minish.exceptions import EnvironmentError

LOGGER_NAME: str = "minish"

_PLAIN_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the ``minish`` logger.

    WARNING and above by default; DEBUG when *verbose*.  Calling this
    again replaces the previously installed handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.handlers.clear()
    logger.propagate = False

    try:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            console=get_rich_console(),
            show_time=True,
            show_level=True,
            show_path=verbose,
            rich_tracebacks=True,
        )
    except (ModuleNotFoundError, EnvironmentError):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger.addHandler(handler)
    return logger
