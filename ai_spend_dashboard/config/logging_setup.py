"""
Logging configuration for the command line.

Routes log records through rich so warnings appear alongside CLI output.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Install a stderr RichHandler on the package logger.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    logger = logging.getLogger("ai_spend_dashboard")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
