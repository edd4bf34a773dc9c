"""
Logging configuration for the daemon.

Until the configuration file has been read, records go to stderr using a
plain ``basicConfig`` setup. Once the log file is known,
``configure_logging`` replaces that with a file handler (and a console
handler in debug mode) using ``TimestampedFormatter``.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..validation.exceptions import io_error

BOOTSTRAP_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class TimestampedFormatter(logging.Formatter):
    """
    Prefixes every line of a record with an ISO-8601 timestamp and the level.

    Multi-line messages (rendered errors, tracebacks, the startup banner)
    therefore stay greppable line by line.
    """

    def __init__(self, fmt: str = "%(message)s"):
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        created = datetime.fromtimestamp(record.created).astimezone()
        return created.strftime(datefmt or TIMESTAMP_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = f"{self.formatTime(record)} [{record.levelname}] "
        lines = message.splitlines() or [""]
        return "\n".join(prefix + line for line in lines)


def configure_bootstrap_logging(debug: bool = False) -> None:
    """Send records to stderr until the configured log file is available."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=BOOTSTRAP_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def configure_logging(log_file: Path, debug: bool = False) -> List[logging.Handler]:
    """
    Route all records to ``log_file``, and to stdout as well in debug mode.

    Args:
        log_file: The log file; missing parent directories are created
        debug: Lower the level to DEBUG and echo records to the console

    Returns:
        The handlers installed on the root logger

    Raises:
        LimiterError: IO if the log file cannot be opened
    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        raise io_error(log_file, "open", str(e))

    handlers: List[logging.Handler] = [file_handler]
    if debug:
        handlers.append(logging.StreamHandler(sys.stdout))

    formatter = TimestampedFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    for old_handler in list(root.handlers):
        root.removeHandler(old_handler)
        old_handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return handlers


def write_banner(version: str, logger: logging.Logger) -> None:
    """Log the boxed startup banner."""
    title = f"Starting Templimiter {version}"
    border = "+" + "-" * (len(title) + 6) + "+"
    logger.info("\n".join([border, f"|   {title}   |", border]))
