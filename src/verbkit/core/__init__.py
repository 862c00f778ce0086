"""Core layer: the verb contract, the registry and the dispatcher.

Rules
-----
* No ``argparse``, ``injector`` or ``signal`` imports; collaborators are
  reached through :mod:`verbkit.core.protocols`.
* No imports from ``cli`` or ``infra``.
* No user-facing output beyond logging.
"""

from verbkit.core.builder import CommandLineBuilder
from verbkit.core.cancellation import CancellationToken
from verbkit.core.models import ParseOutcome, ParseResult, VerbRegistration
from verbkit.core.options import option, value, verb
from verbkit.core.protocols import ArgumentParser, ServiceContainer
from verbkit.core.service import CommandLineService
from verbkit.core.verbs import BooleanVerb, SyncVerb, Verb

__all__: list[str] = [
    "ArgumentParser",
    "BooleanVerb",
    "CancellationToken",
    "CommandLineBuilder",
    "CommandLineService",
    "ParseOutcome",
    "ParseResult",
    "ServiceContainer",
    "SyncVerb",
    "Verb",
    "VerbRegistration",
    "option",
    "value",
    "verb",
]
