"""``injector``-backed implementation of :class:`~verbkit.core.protocols.ServiceContainer`.

Handlers are bound with :class:`injector.NoScope`, so every resolution
builds a new instance.  A handler whose constructor is decorated with
:func:`injector.inject` receives its dependencies from the same injector,
including a ``logging.Logger``::

    class Deploy(BooleanVerb[DeployOptions]):
        @inject
        def __init__(self, logger: logging.Logger, client: ApiClient) -> None:
            super().__init__(logger)
            self._client = client

Application-specific bindings are supplied as regular injector modules.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from injector import Binder, Injector, InstanceProvider, Module, NoScope

T = TypeVar("T")

DEFAULT_LOGGER_NAME = "verbkit.verbs"


class InjectorContainer:
    """Register/resolve facade over an :class:`injector.Injector`.

    Parameters
    ----------
    modules:
        Extra injector modules (or ``configure(binder)`` callables)
        installed before any verb is registered.
    logger:
        The logger injected wherever a handler asks for ``logging.Logger``.
        Defaults to the ``verbkit.verbs`` logger.
    """

    def __init__(
        self,
        modules: Iterable[Module | Any] = (),
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        verb_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

        def _configure(binder: Binder) -> None:
            binder.bind(logging.Logger, to=InstanceProvider(verb_logger))

        self._injector = Injector([_configure, *modules])
        self._registered: set[type] = set()

    @property
    def injector(self) -> Injector:
        """The underlying injector, for bindings beyond verb handlers."""
        return self._injector

    def register(self, kind: type, concrete: type[Any]) -> None:
        self._injector.binder.bind(kind, to=concrete, scope=NoScope)
        self._registered.add(kind)

    def resolve(self, kind: type[T]) -> T | None:
        """Build a new instance of *kind*.

        Returns ``None`` for kinds that were never registered; injector's
        auto-binding would otherwise construct any class it is asked for.
        """
        if kind not in self._registered:
            return None
        return self._injector.get(kind)
