"""Logging configuration for the School Portal API."""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from app.core.config import settings

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
SIMPLE_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack")


def _resolve_level(log_level: Optional[str]) -> int:
    name = log_level or (settings.LOG_LEVEL if settings else "")
    if name:
        return getattr(logging, name.upper(), logging.INFO)
    return logging.DEBUG if settings and settings.DEBUG else logging.INFO


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure the root logger for the whole application.

    Console output is always enabled. When LOG_TO_FILE is set and LOG_DIR is
    writable, ``portal.log`` receives everything and ``errors.log`` receives
    ERROR and above.

    Args:
        log_level: Optional level name overriding LOG_LEVEL / DEBUG
    """
    level = _resolve_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt=SIMPLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if settings is None or settings.LOG_TO_FILE:
        log_dir = Path(settings.LOG_DIR if settings else "logs")
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            root_logger.addHandler(_rotating_handler(log_dir / "portal.log", logging.DEBUG))
            root_logger.addHandler(_rotating_handler(log_dir / "errors.log", logging.ERROR))
        except (PermissionError, OSError):
            root_logger.warning("File logging not available in %s, using console logging only", log_dir)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized at {logging.getLevelName(level)} level")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module (typically ``__name__``)."""
    return logging.getLogger(name)
