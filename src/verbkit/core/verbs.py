"""The verb contract and the two reusable handler shapes built on it.

Every handler implements :class:`Verb` for exactly one options class::

    class Greet(Verb[GreetOptions]):
        async def run(self, options: GreetOptions, token: CancellationToken) -> int:
            print(f"hello {options.name}")
            return 0

Expected failures should come back as a non-zero exit code.  Exceptions
that escape :meth:`Verb.run` are treated as fatal by the dispatcher.
"""

from __future__ import annotations

import abc
import logging
from typing import ClassVar, Generic, TypeVar

from verbkit import exit_codes
from verbkit.core.cancellation import CancellationToken

OptionsT = TypeVar("OptionsT")


class Verb(abc.ABC, Generic[OptionsT]):
    """A command-line verb handling options of type ``OptionsT``."""

    @abc.abstractmethod
    async def run(self, options: OptionsT, token: CancellationToken) -> int:
        """Execute the verb and return the process exit code.

        Parameters
        ----------
        options:
            The parsed command-line options.
        token:
            Triggered when the process is asked to terminate.
        """


class BooleanVerb(Verb[OptionsT]):
    """A verb that succeeds or fails, and never lets an exception escape.

    Subclasses implement :meth:`execute`.  Its boolean result is mapped to
    :attr:`exit_code_success` / :attr:`exit_code_failure`; exceptions are
    logged and mapped to the failure code.
    """

    exit_code_success: ClassVar[int] = exit_codes.SUCCESS
    exit_code_failure: ClassVar[int] = exit_codes.GENERAL_ERROR

    def __init__(self, logger: logging.Logger | None = None) -> None:
        cls = type(self)
        self._logger: logging.Logger = logger or logging.getLogger(
            f"{cls.__module__}.{cls.__qualname__}"
        )

    @property
    def name(self) -> str:
        """Name used in log messages.  Defaults to the class name."""
        return type(self).__name__

    @abc.abstractmethod
    async def execute(self, options: OptionsT, token: CancellationToken) -> bool:
        """Do the work; return whether it succeeded."""

    async def run(self, options: OptionsT, token: CancellationToken) -> int:
        try:
            self._logger.info("Starting execute of %s with options: %s", self.name, options)
            result = await self.execute(options, token)
            self._logger.info("Finished execute of %s with result: %s", self.name, result)
            return self.exit_code_success if result else self.exit_code_failure
        except Exception:
            self._logger.exception("Error occurred while running %s", self.name)
            return self.exit_code_failure


class SyncVerb(Verb[OptionsT]):
    """A verb whose work never suspends.

    Subclasses implement :meth:`run_sync`; the token is not passed on.
    """

    @abc.abstractmethod
    def run_sync(self, options: OptionsT) -> int:
        """Execute the verb and return the process exit code."""

    async def run(self, options: OptionsT, token: CancellationToken) -> int:
        return self.run_sync(options)
