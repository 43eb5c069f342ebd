# utils/logging.py

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "kubectl_mcp"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty below WARNING unless we are debugging ourselves
_LIBRARY_LOGGERS = ("mcp", "fastmcp", "httpx", "httpcore", "uvicorn.access")


def setup_logging(level: str = "info", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for the kubectl MCP server.

    Console output always goes to stderr: with the stdio transport,
    stdout carries the JSON-RPC stream and a single stray log line
    corrupts it.

    Args:
        level: debug, info, warning or error (case-insensitive)
        log_file: Optional file that receives the same records

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.debug(f"Logging configured with level: {level}")
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the kubectl_mcp hierarchy."""
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
