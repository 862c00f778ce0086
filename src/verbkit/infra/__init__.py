"""Infrastructure layer: argparse, injector and OS signal integration.

Rules
-----
* No imports from ``cli``.
* No user-facing output other than argparse usage text on stderr.
* Must satisfy the protocols in :mod:`verbkit.core.protocols`.
"""

from verbkit.infra.argument_parser import ArgparseParser
from verbkit.infra.container import InjectorContainer
from verbkit.infra.signals import release_sigterm, token_from_sigterm

__all__: list[str] = [
    "ArgparseParser",
    "InjectorContainer",
    "release_sigterm",
    "token_from_sigterm",
]
