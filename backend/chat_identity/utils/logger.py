import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..config import settings

LOGGER_NAME = "chat_identity"

_console_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
_file_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def configure_logging(log_file: str = None, level: str = None) -> logging.Logger:
    """Attach console and rotating file handlers to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    # Prevent duplicate logs on reload
    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_console_format)
    logger.addHandler(console_handler)

    log_path = Path(log_file or settings.LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(_file_format)
    logger.addHandler(file_handler)

    error_handler = RotatingFileHandler(
        log_path.with_name("errors.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(_file_format)
    logger.addHandler(error_handler)

    return logger
