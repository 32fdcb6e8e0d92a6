"""
Logging utilities for nanoget.

This module provides logging configuration and helper functions. The
library itself only ever asks for the ``nanoget`` logger; handlers are
installed by applications (the CLI calls ``setup_logging``).
"""

import logging
from typing import Iterable, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "nanoget"
LOG_FORMAT = "%(asctime)s - %(name)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Bodies longer than this are truncated in debug dumps
BODY_PREVIEW_SIZE = 1024


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Set up logging for the application.

    Args:
        level: Logging level (e.g., logging.INFO, logging.DEBUG)
        log_file: Optional file path to write logs to
        verbose: Whether to enable verbose logging

    Returns:
        Configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_path=True,
        show_time=True,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(logging.DEBUG if verbose else level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the library logger."""
    return logging.getLogger(LOGGER_NAME)


def _preview(body: bytes) -> str:
    body_text = body.decode("utf-8", errors="replace")
    if len(body_text) > BODY_PREVIEW_SIZE:
        return f"{body_text[:BODY_PREVIEW_SIZE]}... ({len(body)} bytes)"
    return body_text


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    headers: Iterable[Tuple[str, str]],
    body: Optional[bytes] = None,
) -> None:
    """Log an HTTP request at DEBUG level.

    Args:
        logger: Logger to use
        method: HTTP method
        path: Request target
        headers: Request headers as (name, value) pairs
        body: Request body
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"Sending {method} request to {path}")
    for name, value in headers:
        logger.debug(f"  {name}: {value}")
    if body:
        logger.debug(f"  Body: {_preview(body)}")


def log_response(
    logger: logging.Logger,
    status_code: int,
    headers: Iterable[Tuple[str, str]],
    body: bytes,
    response_time: float,
) -> None:
    """Log an HTTP response at DEBUG level.

    Args:
        logger: Logger to use
        status_code: Response status code
        headers: Response headers as (name, value) pairs
        body: Response body
        response_time: Response time in seconds
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"Received response: {status_code} ({response_time:.6f}s)")
    for name, value in headers:
        logger.debug(f"  {name}: {value}")
    logger.debug(f"  Body: {_preview(body)}")
