"""Logging setup for the kanbanflow-mcp process.

Everything is written to stderr: stdout is the MCP stdio channel and may only
carry protocol messages.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "kanbanflow_mcp"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
QUIET_LOGGERS = ("httpx", "httpcore", "mcp")


def get_log_level(default: int = logging.WARNING) -> int:
    """Read the level name from LOG_LEVEL; unknown names fall back to ``default``."""
    level_name = os.getenv("LOG_LEVEL", "").strip().upper()
    if not level_name:
        return default
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else default


def configure_logging(verbose: bool = False) -> None:
    """
    Send log records to stderr at the LOG_LEVEL level.

    Args:
        verbose: Log this package at DEBUG (every API request) whatever
            LOG_LEVEL says. Third-party loggers stay at WARNING either way.
    """
    logging.basicConfig(
        level=get_log_level(),
        format=DEFAULT_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.NOTSET)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
