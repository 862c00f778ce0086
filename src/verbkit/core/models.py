"""Value objects shared by the builder, the dispatcher and the parser.

All models are frozen dataclasses; a :class:`VerbRegistration` is never
mutated once the builder has created it.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from verbkit.core.cancellation import CancellationToken

Invoker = Callable[[Any, Any, CancellationToken], Awaitable[Any]]
"""``(handler_instance, options_value, token) -> awaitable exit code``."""


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VerbRegistration:
    """One options class paired with the handler class that consumes it."""

    options: type
    """The ``@verb`` options class parsed from the command line."""

    handler: type
    """The handler class resolved from the service container."""

    invoke: Invoker
    """Calls the handler's ``run`` with a fixed signature."""


# ---------------------------------------------------------------------------
# Parse outcome
# ---------------------------------------------------------------------------

class ParseOutcome(enum.Enum):
    PARSED = "parsed"
    ERROR = "error"
    HELP = "help"
    VERSION = "version"


@dataclass(frozen=True, slots=True)
class ParseResult:
    """The outcome of parsing ``argv`` against every registered options class."""

    outcome: ParseOutcome
    options: type | None = None
    """The options class that matched, when :attr:`outcome` is ``PARSED``."""

    value: Any = None
    """The populated options instance."""

    message: str | None = None
    """Why parsing stopped, for every other outcome."""

    @property
    def parsed(self) -> bool:
        return self.outcome is ParseOutcome.PARSED

    @classmethod
    def success(cls, options: type, value: Any) -> ParseResult:
        return cls(ParseOutcome.PARSED, options=options, value=value)

    @classmethod
    def failure(cls, message: str, outcome: ParseOutcome = ParseOutcome.ERROR) -> ParseResult:
        return cls(outcome, message=message)
