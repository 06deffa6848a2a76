"""Logging setup for spaceconvert.

Everything goes through loguru. matrix-nio and aiohttp log through the
standard library, so their records are forwarded into loguru by
:class:`InterceptHandler`.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

LIBRARY_LOGGERS = ("nio", "aiohttp")


class InterceptHandler(logging.Handler):
    """Forward standard-library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that made the logging call
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_library_logging(
    names: Iterable[str] = LIBRARY_LOGGERS,
    level: str = "WARNING",
) -> None:
    """Route the named stdlib loggers into loguru at ``level`` and above.

    Library chatter below WARNING (nio logs every sync at DEBUG) is dropped
    unless a lower level is asked for.
    """
    handler = InterceptHandler()
    for name in names:
        lib_logger = logging.getLogger(name)
        lib_logger.handlers = [handler]
        lib_logger.setLevel(level)
        lib_logger.propagate = False


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False
) -> None:
    """
    Configure loguru sinks and pull library logging into them.

    Args:
        level: Minimum level for console output (default: INFO)
        log_file: Optional path for the persistent log file
        verbose: If True, console goes to DEBUG and library INFO records are kept
    """
    logger.remove()

    if log_file is None:
        log_file = Path.home() / ".spaceconvert" / "spaceconvert.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console_level = "DEBUG" if verbose else level

    logger.add(
        sys.stderr,
        level=console_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        backtrace=True,
        diagnose=False,
    )
    logger.add(
        str(log_file),
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        enqueue=True,
    )

    intercept_library_logging(level="INFO" if verbose else "WARNING")
    logger.debug(f"Logging initialized. Console level: {console_level}, File: {log_file}")
