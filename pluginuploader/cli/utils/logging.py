import logging
import sys
from typing import Optional

import click

logger = logging.getLogger("pluginuploader")

MESSAGE_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(levelname)-7s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(debug: bool):
    """
    Send the package log to stdout, including debug records and their origin
    in debug mode. Handlers installed by the host application are kept.
    """
    global _handler
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if _handler is None and not logger.hasHandlers():
        _handler = logging.StreamHandler(sys.stdout)
        logger.addHandler(_handler)
    if _handler is not None:
        _handler.setFormatter(logging.Formatter(DEBUG_FORMAT if debug else MESSAGE_FORMAT))


def log_error(message: str, error: Optional[BaseException] = None):
    """Log a styled error line, with the traceback in debug mode."""
    logger.error(click.style("[ERROR]", fg="red", bold=True) + f" {message}")
    if error is not None and logger.isEnabledFor(logging.DEBUG):
        logger.debug("Full traceback:", exc_info=error)
