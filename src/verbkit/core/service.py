"""The dispatcher: raw arguments in, exit code out.

:meth:`CommandLineService.run` is a single fail-fast pass:

1. Parse the arguments against every registered options class.
2. Find the registration owning the class that matched.
3. Resolve a fresh handler from the service container.
4. Invoke it with the parsed options and the shared token.

Anything that goes wrong in steps 1-4 is a *recovered* failure: a warning
is logged and the configured failure exit code is returned.  Exceptions
raised by the handler itself are logged and re-raised.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from typing import Any

from verbkit.core.builder import CommandLineBuilder
from verbkit.core.cancellation import CancellationToken
from verbkit.core.models import ParseOutcome
from verbkit.core.protocols import ArgumentParser, ServiceContainer
from verbkit.exceptions import VerbContractError

logger = logging.getLogger(__name__)

_PARSE_MESSAGES: dict[ParseOutcome, str] = {
    ParseOutcome.ERROR: "Could not parse command line arguments (did you --help?)",
    ParseOutcome.HELP: "Help requested; no verb was run",
    ParseOutcome.VERSION: "Version requested; no verb was run",
}


class CommandLineService:
    """Runs the verb selected by the command-line arguments.

    Parameters
    ----------
    builder:
        The frozen registry of verbs and run settings.
    container:
        Builds handler instances.
    parser:
        Turns raw arguments into one options instance.
    """

    def __init__(
        self,
        builder: CommandLineBuilder,
        container: ServiceContainer,
        parser: ArgumentParser,
        *,
        log: logging.Logger | None = None,
    ) -> None:
        self._builder = builder
        self._container = container
        self._parser = parser
        self._logger: logging.Logger = log or logger

    async def run(self, args: Sequence[str]) -> int:
        """Dispatch *args* and return the exit code of the executed verb."""
        try:
            return await self.run_with_args(args)
        except Exception:
            self._logger.exception("Error occurred while running application")
            raise

    def fail(self, message: str, *args: Any) -> int:
        """Log a recovered failure and return the failure exit code."""
        self._logger.warning(message, *args)
        return self._builder.exit_code_failure

    async def run_with_args(self, args: Sequence[str]) -> int:
        registrations = self._builder.verbs
        kinds = [reg.options for reg in registrations]

        result = self._parser.parse(list(args), kinds)
        if not result.parsed:
            if result.message:
                self._logger.debug("Parser reported: %s", result.message)
            return self.fail(_PARSE_MESSAGES[result.outcome])

        registration = next((reg for reg in registrations if reg.options is result.options), None)
        if registration is None:
            return self.fail("Could not determine verb type for: %s", _name(result.options))

        handler_name = registration.handler.__name__
        service = self._container.resolve(registration.handler)
        if service is None:
            return self.fail("Could not determine verb service for: %s", handler_name)

        token = self._builder.token or CancellationToken.none()
        try:
            pending = registration.invoke(service, result.value, token)
        except VerbContractError as exc:
            return self.fail("%s", exc)

        if not inspect.isawaitable(pending):
            return self.fail("Run method does not return an awaitable for: %s", handler_name)

        code = await pending
        if isinstance(code, bool) or not isinstance(code, int):
            return self.fail("Run method did not return an integer exit code for: %s", handler_name)
        return code


def _name(kind: type | None) -> str:
    return getattr(kind, "__name__", repr(kind))
