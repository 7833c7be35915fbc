"""
Logging setup for docx_cascade.

Modules log through ``logging.getLogger(__name__)``; the application decides
where records go by calling :func:`configure_logging`.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "docx_cascade"
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for module.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not name or not isinstance(name, str):
        raise ValueError("Logger name must be a non-empty string")
    return logging.getLogger(name)


def configure_logging(
    level: str = "INFO",
    rich_output: bool = True,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rich_output: Use a rich handler instead of a plain stream handler
        console: Optional rich console to write to

    Returns:
        The configured package logger
    """
    if level.upper() not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    if rich_output:
        handler: logging.Handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    handler.setLevel(getattr(logging, level.upper()))
    logger.addHandler(handler)
    return logger
