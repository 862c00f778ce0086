"""verbkit: typed command-line verbs dispatched through a service container.

Options classes describe the arguments of one verb, handler classes
implement :class:`~verbkit.core.verbs.Verb`, and the CLI entry point
wires both together, parses ``argv`` and awaits the matching handler.
"""

from verbkit.cli.app import cli, run_cli
from verbkit.core.builder import CommandLineBuilder
from verbkit.core.cancellation import CancellationToken
from verbkit.core.options import option, value, verb
from verbkit.core.verbs import BooleanVerb, SyncVerb, Verb
from verbkit.infra.signals import release_sigterm, token_from_sigterm
from verbkit.version import __version__

__all__: list[str] = [
    "BooleanVerb",
    "CancellationToken",
    "CommandLineBuilder",
    "SyncVerb",
    "Verb",
    "__version__",
    "cli",
    "option",
    "release_sigterm",
    "run_cli",
    "token_from_sigterm",
    "value",
    "verb",
]
