"""
Logging Configuration Module.

Logging for the storefinder command line tools: a rotating log file plus
optional console output on stderr, so that results printed to stdout stay
machine readable. Connection chatter from urllib3 (used by requests) is held
at WARNING unless debugging.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

logger = logging.getLogger(__name__)

LOG_DIR = "logs"
LOG_DIR_ENV = "STOREFINDER_LOG_DIR"
LOG_FILENAME = "storefinder.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
QUIET_LOGGERS = ("urllib3",)


def resolve_log_path(log_dir: Optional[str] = None) -> Optional[str]:
    """
    Picks and creates the log directory.

    Args:
        log_dir: Explicit directory. Falls back to $STOREFINDER_LOG_DIR, then
            ``logs``.

    Returns:
        The log file path, or None when the directory cannot be created.
    """
    directory = log_dir or os.environ.get(LOG_DIR_ENV) or LOG_DIR
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        print(f"Cannot create log directory {directory}: {e}", file=sys.stderr)
        return None
    return os.path.join(directory, LOG_FILENAME)


def _detach_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    debug_mode: bool = False, log_to_console: bool = True, log_dir: Optional[str] = None
) -> Optional[str]:
    """
    Configures the root logger. Safe to call again; earlier handlers are
    replaced.

    Args:
        debug_mode: Log at DEBUG instead of INFO.
        log_to_console: Also log to stderr.
        log_dir: Directory for the rotating log file.

    Returns:
        Path of the log file, or None when only the console is used.
    """
    root_logger = logging.getLogger()
    _detach_handlers(root_logger)

    level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = resolve_log_path(log_dir)
    if log_path is not None:
        try:
            file_handler = RotatingFileHandler(
                log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
            )
        except OSError as e:
            print(f"Could not open log file {log_path}: {e}", file=sys.stderr)
            log_path = None
        else:
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

    if log_to_console or log_path is None:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug_mode else logging.WARNING)

    logger.info(
        f"Logging at {logging.getLevelName(level)} to {log_path or 'stderr only'}"
    )
    return log_path


def shutdown_logging() -> None:
    """Flushes and detaches the root handlers, releasing the log file."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.flush()
    _detach_handlers(root_logger)
