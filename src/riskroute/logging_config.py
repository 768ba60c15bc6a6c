"""
Logging for riskroute.

Records go to stderr through a rich handler so that JSON payloads printed on
stdout stay machine-readable. The console level follows the configured
verbosity; a configured ``log_file`` additionally receives every DEBUG
record, whatever the verbosity.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "riskroute"

VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach riskroute's handlers to the ``riskroute`` logger.

    Handlers go on the package logger, not the root, so an application that
    embeds riskroute keeps its own logging setup. Calling this again replaces
    the handlers from the previous call.

    Args:
        verbosity: "quiet" (ERROR), "normal" (WARNING) or "verbose" (DEBUG)
        log_file: Optional path that receives all records at DEBUG

    Returns:
        The configured riskroute logger
    """
    level = VERBOSITY_LEVELS[verbosity]
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_path=verbosity == "verbose",
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file else level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the riskroute namespace.

    Args:
        name: Module name (e.g., 'riskroute.diff.risk'). Other names are
              prefixed with 'riskroute.'; None returns the package logger.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
