# src/summarize/logging_config.py
"""Logging configuration for summarize."""
import logging
import os
import sys

from summarize.models import Notice

LOGGER_NAME = "summarize"


def setup_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Set up a logger with a stderr console handler."""
    logger = logging.getLogger(name)

    # Only add handlers if the logger doesn't have any
    if not logger.handlers:
        level = os.getenv("SUMMARIZE_LOG_LEVEL", "WARNING").upper()
        logger.setLevel(getattr(logging, level, logging.WARNING))

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def log_notice(notice: Notice) -> None:
    """Default warnings channel: one WARNING record per notice."""
    logging.getLogger(LOGGER_NAME).warning(
        "[%s] %s: %s", notice.kind.value, notice.path, notice.message
    )
