"""stderr console and log configuration for the CLI layer.

Everything verbkit writes for humans goes to stderr through Rich, so a
verb's own stdout stays clean for piping.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "VERBKIT_LOG_LEVEL"
"""Environment variable consulted when no explicit log level is given."""

_HANDLER_NAME = "verbkit-rich"


def get_rich_console() -> Console:
    """Create a Rich console instance targeting stderr."""
    return Console(stderr=True)


console = get_rich_console()


def resolve_log_level(level: int | str | None = None) -> int:
    """Turn *level* (or ``$VERBKIT_LOG_LEVEL``, or ``INFO``) into a number.

    Raises
    ------
    ValueError
        When the level name is unknown.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: int | str | None = None) -> None:
    """Route the root logger through a stderr :class:`RichHandler`.

    Calling it again only adjusts the level; the handler is installed once.
    """
    root = logging.getLogger()
    root.setLevel(resolve_log_level(level))

    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
