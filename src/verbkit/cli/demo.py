"""``sigterm`` sample verb, run by ``python -m verbkit``.

Waits for ``--max-timeout`` seconds or until the process is asked to stop,
whichever comes first, then exits successfully.  Press Ctrl+C while it
waits to see the cancellation token in action.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import ClassVar

from injector import inject

from verbkit.cli.app import cli
from verbkit.core.builder import CommandLineBuilder
from verbkit.core.cancellation import CancellationToken
from verbkit.core.options import option, verb
from verbkit.core.verbs import BooleanVerb
from verbkit.exceptions import OperationCancelledError
from verbkit.infra.argument_parser import ArgparseParser
from verbkit.version import __version__


@verb("sigterm", help="Wait for a termination signal or a timeout.", default=True)
class SigtermOptions:
    max_timeout: int = option(
        "-m",
        "--max-timeout",
        default=10,
        help="The maximum amount of time (in seconds) to wait before exiting",
    )


class SigtermVerb(BooleanVerb[SigtermOptions]):
    time_scale: ClassVar[float] = 1.0
    """Seconds per unit of ``--max-timeout``."""

    @inject
    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger)

    async def execute(self, options: SigtermOptions, token: CancellationToken) -> bool:
        timeout = options.max_timeout * self.time_scale
        try:
            self._logger.info("Waiting for sigterm or for %ss", timeout)
            await token.sleep(timeout)
        except OperationCancelledError:
            self._logger.warning("Wait interrupted; the operation was cancelled")

        self._logger.info("Finished. Was cancelled: %s", token.cancelled)
        return True


def configure(builder: CommandLineBuilder) -> None:
    builder.add(SigtermVerb)


def main(argv: Sequence[str] | None = None) -> None:
    cli(configure, argv, parser=ArgparseParser(prog="verbkit", version=__version__))
