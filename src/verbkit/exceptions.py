"""Custom exception hierarchy for verbkit.

Errors that indicate a programming mistake (a malformed handler or a
clash between two verbs) are raised while the builder is being
configured.  Problems caused by the command line itself never escape the
dispatcher: they are logged and turned into the failure exit code.

Hierarchy
---------
VerbkitError
├── ConfigurationError
│   └── DuplicateVerbError
├── VerbContractError
├── ArgumentParseError
│   └── HelpRequested
└── OperationCancelledError
"""

from __future__ import annotations


class VerbkitError(Exception):
    """Base exception for all verbkit errors.

    The CLI error boundary renders the message (and the optional hint)
    without a stack trace.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Registration ----------------------------------------------------------

class ConfigurationError(VerbkitError):
    """Raised when a verb handler or options class is declared incorrectly."""


class DuplicateVerbError(ConfigurationError):
    """Raised when two registrations would match the same arguments."""


# --- Dispatch --------------------------------------------------------------

class VerbContractError(VerbkitError):
    """Raised when a resolved handler cannot be invoked as a verb."""


# --- Parsing ---------------------------------------------------------------

class ArgumentParseError(VerbkitError):
    """Raised by the argparse backend instead of exiting the process."""


class HelpRequested(ArgumentParseError):
    """Raised when ``--help`` or ``--version`` short-circuits parsing."""

    def __init__(self, message: str, *, version: bool = False) -> None:
        super().__init__(message)
        self.version: bool = version


# --- Cancellation ----------------------------------------------------------

class OperationCancelledError(VerbkitError):
    """Raised by cancellable waits once their token has been triggered."""
