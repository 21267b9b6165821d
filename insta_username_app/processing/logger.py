"""
Logging Configuration Module

Centralized logging setup for the app and all processing modules.
Logs are stored in the logs/ directory with rotation.
"""

import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_log_dir() -> Path:
    """Get the log directory path."""
    log_dir = os.getenv('LOG_DIR')
    if log_dir:
        return Path(log_dir)

    # Default to logs/ next to the package
    app_dir = Path(__file__).parent.parent
    return app_dir / 'logs'


def get_log_level() -> int:
    """Resolve LOG_LEVEL (name or number), falling back to INFO."""
    raw = os.getenv('LOG_LEVEL', 'INFO').strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Setup a logger with file and console handlers.

    Args:
        name: Logger name (usually module name)
        level: Logging level (default: from LOG_LEVEL)
        log_file: File name inside the log directory (default: <name>.log)

    Returns:
        Configured logger instance
    """
    if level is None:
        level = get_log_level()

    log_dir = get_log_dir()
    log_dir.mkdir(exist_ok=True, parents=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        log_dir / (log_file or f"{name}.log"),
        maxBytes=10*1024*1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Console handler (always enabled for visibility in container logs)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with default configuration.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logger(name)

    return logger
