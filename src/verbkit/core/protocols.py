"""Protocols (interfaces) for the collaborators the core depends on.

Core code depends ONLY on these protocols.  The argparse parser and the
injector-backed container in :mod:`verbkit.infra` satisfy them
structurally; tests substitute their own fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

from verbkit.core.models import ParseResult

T = TypeVar("T")


class ArgumentParser(Protocol):
    """Contract for turning raw arguments into one options instance."""

    def parse(self, args: Sequence[str], kinds: Sequence[type]) -> ParseResult:
        """Parse *args* against every options class in *kinds*.

        At most one class may match.  Malformed input and explicit
        help/version requests are reported as a failed
        :class:`~verbkit.core.models.ParseResult`; implementations must
        not raise for them and must not exit the process.
        """
        ...  # pragma: no cover


class ServiceContainer(Protocol):
    """Contract for constructing handlers and their dependencies."""

    def register(self, kind: type, concrete: type[Any]) -> None:
        """Bind *kind* to *concrete* with a transient lifetime.

        Every :meth:`resolve` of *kind* builds a fresh instance.
        """
        ...  # pragma: no cover

    def resolve(self, kind: type[T]) -> T | None:
        """Return an instance for *kind*, or ``None`` when nothing is bound."""
        ...  # pragma: no cover
