"""Logging configuration for the quotation importer."""

import logging
import sys
from typing import Iterable, Optional

LOGGER_NAMESPACE = "quote_importer"

# The Supabase client logs every HTTP request at INFO through these.
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None, quiet: Iterable[str] = NOISY_LOGGERS) -> logging.Logger:
    """
    Configure logging for the importer and the backend.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Unknown names and ``None`` fall back to INFO.
        quiet: Third-party loggers capped at WARNING.

    Returns:
        The package logger every module logger hangs off.
    """
    log_level = getattr(logging, level.upper(), logging.INFO) if level else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(log_level)
    # Reconfiguring (app reloads, tests) must not stack handlers
    package_logger.handlers.clear()
    package_logger.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace; ``__name__`` of package modules is kept as is."""
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
