"""Logging module."""

import logging
import sys
from logging.handlers import RotatingFileHandler

import coloredlogs

STDOUT_LOG_PATH = "-"

logger = logging.getLogger("configure_logging")


def configure_logging(log_path: str = STDOUT_LOG_PATH, verbose: bool = False) -> None:
    """Configure logging.

    Args:
        log_path: File to append logs to, "-" to log to stdout only.
        verbose: Also show debug logs.

    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger().setLevel(logging.NOTSET)
    logging.getLogger().handlers.clear()

    file_error = None
    if log_path != STDOUT_LOG_PATH:
        try:
            fileh = RotatingFileHandler(
                log_path,
                mode="a",
                maxBytes=10 * 1024 * 1024,
                backupCount=1,
                encoding="utf-8",
                delay=False,
            )
            formatter = logging.Formatter(
                "%(asctime)s %(levelname)s %(message)s [%(filename)s:%(lineno)d]"
            )
            fileh.setFormatter(formatter)
            fileh.setLevel(level)
            logging.getLogger().addHandler(fileh)
        except OSError as e:
            file_error = e

    coloredlogs.install(
        level=level,
        stream=sys.stdout,
        fmt="%(asctime)s %(levelname)s %(message)s",
    )

    if file_error is not None:
        logger.error(f"Opening log file: {log_path}: {file_error}")
    elif log_path != STDOUT_LOG_PATH:
        logger.debug(f"Writing logs to file: {log_path}")

    # Remove chatty third party logs
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("mpd").setLevel(logging.WARNING)
