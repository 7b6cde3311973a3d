#!/usr/bin/env python3
"""
Logging configuration for lifecycled.

Provides structured logging with appropriate levels for the daemon, and an
adapter that carries contextual fields (instance, queue, notice type) into
every record logged through it.
"""

import logging
import sys
from typing import Any

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "logger",
        "description": "Logging configuration",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


def format_details(details: dict[str, Any]) -> str:
    """Render structured details as key=value pairs.

    Args:
        details: Dictionary of details

    Returns:
        Comma-separated key=value string
    """
    return ", ".join(f"{k}={v}" for k, v in details.items())


class FieldLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that appends its fields to every message."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        if self.extra:
            msg = f"{msg} ({format_details(self.extra)})"
        return msg, kwargs


def with_fields(
    logger: logging.Logger | logging.LoggerAdapter, **fields: Any
) -> FieldLoggerAdapter:
    """Return a logger that adds fields to each message.

    Fields already bound to an adapter are kept; new fields win on conflict.

    Args:
        logger: Logger or adapter to extend
        **fields: Contextual fields

    Returns:
        FieldLoggerAdapter carrying the merged fields
    """
    if isinstance(logger, logging.LoggerAdapter):
        merged = {**(logger.extra or {}), **fields}
        return FieldLoggerAdapter(logger.logger, merged)
    return FieldLoggerAdapter(logger, fields)


def setup_logger(name: str = "lifecycled", verbose: bool = False) -> logging.Logger:
    """Configure and return a logger instance.

    Args:
        name: Logger name
        verbose: If True, set level to DEBUG; otherwise INFO

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG if verbose else logging.INFO)

        # Format: timestamp - name - level - message
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)

    return logger


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    details: dict[str, Any] | None = None,
    level: int = logging.INFO,
) -> None:
    """Log an operation with structured details.

    Args:
        logger: Logger instance
        operation: Operation description
        details: Optional dictionary of details
        level: Logging level
    """
    message = f"{operation}"
    if details:
        message = f"{message} ({format_details(details)})"

    logger.log(level, message)


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
