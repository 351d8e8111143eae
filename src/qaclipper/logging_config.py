"""
Logging setup for the qaclipper package logger.

Every module logs through ``logging.getLogger(__name__)``, so all records
end up under the "qaclipper" logger configured here. The console handler
writes to stderr: the converted document goes to stdout and must stay
pipeable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "qaclipper"

# Console lines sit between rich status messages, so they stay short
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: str = "WARNING", verbose: bool = False, quiet: bool = False) -> str:
    """
    Combine a configured level with the CLI's --verbose/--quiet flags.

    --verbose wins over --quiet; both override the configured level.

    Examples:
        >>> resolve_level("INFO", verbose=True)
        'DEBUG'
        >>> resolve_level("INFO", quiet=True)
        'ERROR'
    """
    if verbose:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return level.upper()


def _handler(handler: logging.Handler, level: int, format_string: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Configure the qaclipper logger.

    Args:
        level: Logging level name; unknown names fall back to WARNING
        log_file: Optional file that receives the same records, timestamped
        format_string: Overrides both the console and the file format
        force: Replace existing handlers instead of keeping them

    Returns:
        The configured "qaclipper" logger
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.addHandler(_handler(logging.StreamHandler(sys.stderr), numeric_level, format_string or CONSOLE_FORMAT))
        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            logger.addHandler(_handler(file_handler, numeric_level, format_string or FILE_FORMAT))

    # Records would otherwise be printed a second time by the root logger
    logger.propagate = False

    return logger
