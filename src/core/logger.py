"""Logging configuration."""

import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime

from .config import Config


def setup_logger(name="XdgIconConvert"):
    """Set up application logger."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_format = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler with rotation
    try:
        Config.LOGS_DIR.mkdir(parents=True, exist_ok=True)

        log_file = Config.LOGS_DIR / f"xdgicon_convert_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_format = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)
    except Exception as e:
        # If file logging fails, log to console only
        logger.warning(f"Failed to setup file logging: {e}")

    return logger


def add_file_handler(logger, log_file):
    """Attach a plain append-mode log file to an existing logger.

    Returns the handler, or None when the file cannot be opened.
    """
    try:
        handler = logging.FileHandler(str(log_file), mode='a', encoding='utf-8')
    except OSError as e:
        logger.error(f"Cannot open log file {log_file}: {e}")
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter('[%(asctime)s] %(message)s', '%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)
    return handler
