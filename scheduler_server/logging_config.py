"""
Centralized logging setup.

Modules log through ``logging.getLogger(__name__)``; entry points (CLI,
REST service, MCP server) call ``configure_logging`` once at startup to
route everything through a rich console handler.
"""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Install a RichHandler on the root logger.

    :param level: Log level name, case insensitive.
    :param console: Optional console to log to. Defaults to stderr.
    :raises ValueError: If the level name is unknown.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level_upper)

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Replace existing handlers so repeated calls don't duplicate output
    root.handlers = [handler]
