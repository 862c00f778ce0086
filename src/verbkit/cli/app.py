"""Entry points that wire a verb registry to a process.

:func:`run_cli` is the awaitable core: it builds the registry through the
caller's configuration callback, freezes it and dispatches the arguments.
:func:`cli` is the **script-level error boundary** around it, meant to be
the body of a console-script ``main()``::

    def main() -> None:
        cli(lambda builder: builder.add(Deploy).add(Rollback))
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Sequence
from typing import Any, NoReturn

from rich.markup import escape

from verbkit import exit_codes
from verbkit.cli.console import configure_logging, console
from verbkit.core.builder import CommandLineBuilder
from verbkit.core.cancellation import CancellationToken
from verbkit.core.protocols import ArgumentParser, ServiceContainer
from verbkit.core.service import CommandLineService
from verbkit.exceptions import VerbkitError
from verbkit.infra.argument_parser import ArgparseParser
from verbkit.infra.container import InjectorContainer
from verbkit.infra.signals import release_sigterm, token_from_sigterm

Configure = Callable[[CommandLineBuilder], Any]


async def run_cli(
    args: Sequence[str] | None,
    configure: Configure | None,
    *,
    container: ServiceContainer | None = None,
    token: CancellationToken | None = None,
    parser: ArgumentParser | None = None,
) -> int:
    """Configure the verbs, dispatch *args* and return the exit code.

    Parameters
    ----------
    args:
        Raw arguments without the program name.  ``None`` means
        ``sys.argv[1:]``.
    configure:
        Called once with the :class:`CommandLineBuilder` to register verbs
        and settings.  The builder is frozen when it returns.
    container:
        Service container for handlers.  Defaults to a fresh
        :class:`~verbkit.infra.container.InjectorContainer`.
    token:
        Token handed to the verb.  Defaults to one triggered by SIGINT,
        SIGTERM or interpreter exit; ``configure`` may still replace it.
        A default token is detached from the signals when the run ends.
    parser:
        Argument parser.  Defaults to :class:`~verbkit.infra.argument_parser.ArgparseParser`.
    """
    container = container if container is not None else InjectorContainer()
    builder = CommandLineBuilder(container)
    owned = token is None
    if owned:
        token = token_from_sigterm()
    builder.cancel_token(token)

    try:
        if configure is not None:
            configure(builder)
        builder.freeze()

        service = CommandLineService(builder, container, parser or ArgparseParser())
        return await service.run(list(sys.argv[1:] if args is None else args))
    finally:
        if owned:
            release_sigterm(token)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli(
    configure: Configure | None,
    argv: Sequence[str] | None = None,
    *,
    container: ServiceContainer | None = None,
    parser: ArgumentParser | None = None,
    log_level: int | str | None = None,
) -> NoReturn:
    """Run :func:`run_cli` on a fresh event loop and exit with its code.

    Configuration mistakes and unexpected exceptions are rendered as a
    short message instead of a raw stack trace.
    """
    try:
        configure_logging(log_level)
        code = asyncio.run(run_cli(argv, configure, container=container, parser=parser))
        sys.exit(code)
    except VerbkitError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red]\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
