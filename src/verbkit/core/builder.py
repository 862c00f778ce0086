"""Verb registry populated by the application's configuration callback.

The builder pairs every ``@verb`` options class with the handler that
consumes it, registers the handler with the service container, and holds
the process-wide run settings (exit codes and the cancellation token).
Once the configuration callback returns the builder is frozen and only
read by the dispatcher.
"""

from __future__ import annotations

import inspect
from typing import Any, get_args, get_origin

from verbkit import exit_codes
from verbkit.core.cancellation import CancellationToken
from verbkit.core.models import Invoker, VerbRegistration
from verbkit.core.options import is_verb_options, verb_spec
from verbkit.core.protocols import ServiceContainer
from verbkit.core.verbs import Verb
from verbkit.exceptions import ConfigurationError, DuplicateVerbError, VerbContractError


class CommandLineBuilder:
    """Append-only registry of verbs plus run settings.

    Parameters
    ----------
    container:
        Receives a transient binding for every registered handler.
    """

    def __init__(self, container: ServiceContainer) -> None:
        if container is None:
            raise ConfigurationError("A service container is required.")
        self._container = container
        self._verbs: list[VerbRegistration] = []
        self._frozen = False
        self.exit_code_success: int = exit_codes.SUCCESS
        self.exit_code_failure: int = exit_codes.GENERAL_ERROR
        self.token: CancellationToken | None = None

    @property
    def verbs(self) -> tuple[VerbRegistration, ...]:
        """Registrations in the order they were added."""
        return tuple(self._verbs)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Seal the builder; later configuration calls raise."""
        self._frozen = True

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, handler: type, options: type | None = None) -> CommandLineBuilder:
        """Register *handler* as the verb for *options*.

        When *options* is omitted it is read from the ``Verb[...]`` base
        the handler is parameterised with.

        Raises
        ------
        ConfigurationError
            When *options* is omitted and cannot be derived from *handler*.
        DuplicateVerbError
            When the options class, its verb name, or the default-verb
            slot is already taken.
        """
        self._ensure_mutable()
        if options is None:
            options = options_type_of(handler)

        self._check_unique(options)
        self._verbs.append(VerbRegistration(options, handler, _invoker_for(options)))
        self._container.register(handler, handler)
        return self

    def exit_code(
        self,
        success: int = exit_codes.SUCCESS,
        failure: int = exit_codes.GENERAL_ERROR,
    ) -> CommandLineBuilder:
        """Set the exit codes returned for success and for failure."""
        self._ensure_mutable()
        self.exit_code_success = success
        self.exit_code_failure = failure
        return self

    def cancel_token(self, token: CancellationToken | None = None) -> CommandLineBuilder:
        """Set the token handed to the verb.  ``None`` means never cancelled."""
        self._ensure_mutable()
        self.token = token
        return self

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise ConfigurationError(
                "The command line builder is frozen.",
                hint="Register verbs inside the configuration callback.",
            )

    def _check_unique(self, options: type) -> None:
        if any(reg.options is options for reg in self._verbs):
            raise DuplicateVerbError(f"Options type {options.__name__} is already registered.")

        # Unmarked options cannot be matched by name; the parser rejects them later.
        if not is_verb_options(options):
            return

        spec = verb_spec(options)
        for reg in self._verbs:
            if not is_verb_options(reg.options):
                continue
            other = verb_spec(reg.options)
            clash = set(spec.names) & set(other.names)
            if clash:
                raise DuplicateVerbError(
                    f"Verb name {sorted(clash)[0]!r} is used by both "
                    f"{reg.options.__name__} and {options.__name__}."
                )
            if spec.default and other.default:
                raise DuplicateVerbError(
                    f"Both {reg.options.__name__} and {options.__name__} are default verbs."
                )


def options_type_of(handler: type) -> type:
    """Return the options class *handler* is parameterised with.

    Walks the generic bases of *handler* and its ancestors looking for a
    concrete ``Verb[Options]`` (or ``BooleanVerb[Options]`` etc.).
    """
    if not isinstance(handler, type) or not issubclass(handler, Verb):
        raise ConfigurationError(
            f"{getattr(handler, '__name__', handler)!r} must implement Verb[TOptions].",
        )

    for klass in handler.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if not (isinstance(origin, type) and issubclass(origin, Verb)):
                continue
            args = [arg for arg in get_args(base) if isinstance(arg, type)]
            if not args:
                continue
            for arg in args:
                if is_verb_options(arg):
                    return arg
            raise ConfigurationError(
                f"The options type {args[0].__name__} of {handler.__name__} "
                "requires the @verb marker.",
            )

    raise ConfigurationError(
        f"{handler.__name__} must be parameterised with its options type, "
        "e.g. BooleanVerb[MyOptions].",
    )


def _invoker_for(options: type) -> Invoker:
    """Build the fixed-signature call used by the dispatcher for *options*.

    The handler's ``run`` is checked before it is called: it must accept
    ``(options, token)`` and be a coroutine function.
    """

    def invoke(handler: Any, value: Any, token: CancellationToken) -> Any:
        name = type(handler).__name__
        if not isinstance(value, options):
            raise VerbContractError(
                f"Expected {options.__name__} options, got {type(value).__name__}."
            )
        run = getattr(handler, "run", None)
        if not callable(run):
            raise VerbContractError(f"Could not find run method on verb service for: {name}")
        try:
            inspect.signature(run).bind(value, token)
        except (TypeError, ValueError):
            raise VerbContractError(
                f"Run method does not accept (options, token) for: {name}"
            ) from None
        if not inspect.iscoroutinefunction(run):
            raise VerbContractError(f"Run method does not return an awaitable for: {name}")
        return run(value, token)

    return invoke
