"""Exit-code constants shared by every layer.

These are the defaults; a builder may override the success and failure
codes with :meth:`~verbkit.core.builder.CommandLineBuilder.exit_code`.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The verb ran and reported success."""

GENERAL_ERROR: int = 1
"""The verb failed, or the arguments could not be dispatched."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C escaped the cancellation token.  POSIX convention (128 + SIGINT=2)."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped the dispatcher."""
