import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from platformdirs import user_log_path

LOGGER_NAME = "voicescribe"
LOG_FILE_NAME = "app.log"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger_instance: Optional[logging.Logger] = None


def get_log_dir() -> Path:
    log_dir = user_log_path(LOGGER_NAME, appauthor=False)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _configure(root_logger: logging.Logger) -> None:
    from ..core.settings.config import LOG_TO_CONSOLE, get_log_level

    level = get_log_level()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            get_log_dir() / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    ]
    if LOG_TO_CONSOLE:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    root_logger.propagate = False


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Return a logger under the ``voicescribe`` hierarchy.

    The package root logger gets its handlers on first use; module loggers
    propagate to it.
    """
    global _logger_instance

    if _logger_instance is None:
        root_logger = logging.getLogger(LOGGER_NAME)
        # A nested call made while config is importing may already have run.
        if not root_logger.handlers:
            _configure(root_logger)
        _logger_instance = root_logger

    if name == LOGGER_NAME:
        return _logger_instance

    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Close and detach every handler so the log file is released."""
    global _logger_instance
    root_logger = logging.getLogger(LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    _logger_instance = None
