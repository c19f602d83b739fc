#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

# Standard library imports
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any

# Local application imports
import constants as const


# Module-level logger
logger = logging.getLogger(__name__)


def setup_logger(name: str | None = None, level: str | None = None, console: bool = True, log_file: str | None = None) -> logging.Logger:
    """
    Setup a logger with file and optional console output.

    Args:
        name: Logger name (use __name__ from calling module). If None, configures root logger.
        level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO or env LOG_LEVEL.
        console: Whether to also log to console (stderr, so stdio transports stay clean)
        log_file: Custom log filename (defaults to const.LOG_FILE)

    Returns:
        logging.Logger: Configured logger instance

    Example:
        # For the MCP server with its own log file:
        util.setup_logger(name=None, level='INFO', console=True, log_file=const.API_LOG_FILE)
        logger = logging.getLogger(__name__)
    """
    # Determine log level from parameter, environment, or default to INFO
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()

    numeric_level = getattr(logging, level, logging.INFO)

    # Get or create logger
    logger = logging.getLogger(name) if name else logging.getLogger()

    # Avoid duplicate handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(numeric_level)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%H:%M:%S"
    )

    log_filename = log_file if log_file else const.LOG_FILE

    # File handler with rotation (don't delete on startup)
    file_handler = RotatingFileHandler(
        filename=log_filename,
        maxBytes=const.MAX_LOG_SIZE,
        backupCount=const.BACKUP_COUNT,
        encoding="utf-8"
    )
    file_handler.setFormatter(detailed_formatter)
    file_handler.setLevel(logging.DEBUG)  # Capture everything to file
    logger.addHandler(file_handler)

    # StreamHandler defaults to stderr; stdout belongs to the stdio transport
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(numeric_level)
        logger.addHandler(console_handler)

    return logger


# MCP logging/setLevel uses syslog severities; map them onto logging levels
MCP_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}


def set_log_level(level: str) -> int:
    """
    Change the console log level at runtime (MCP logging/setLevel).

    The rotating log file stays at DEBUG.

    Args:
        level: MCP or logging level name, case-insensitive (debug, notice, WARNING, ...)

    Returns:
        The numeric level applied

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = MCP_LOG_LEVELS.get(level.lower())
    if numeric_level is None:
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(numeric_level)

    logger.info(f"Log level set to {logging.getLevelName(numeric_level)}")
    return numeric_level


def mask_key(key: str | None) -> str:
    """Mask an API key for log output, keeping the first and last four characters."""
    if not key:
        return "(not configured)"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"


def select_fields(data: Any, fields: str | None) -> Any:
    """
    Project a decoded JSON result onto a comma-separated list of top-level fields.

    Dicts keep only the named keys; lists of dicts are projected element by
    element. Anything else (scalars, lists of arrays such as klines) is returned
    unchanged, as is everything when no field names are given.
    """
    if not fields:
        return data

    wanted = [f.strip() for f in fields.split(",") if f.strip()]
    if not wanted:
        return data

    if isinstance(data, dict):
        return {k: data[k] for k in wanted if k in data}
    if isinstance(data, list):
        return [
            {k: item[k] for k in wanted if k in item} if isinstance(item, dict) else item
            for item in data
        ]
    return data
