"""Declarative options classes.

An options class is a dataclass marked with :func:`verb`.  Each field
describes one argument of that verb::

    @verb("sigterm", help="Wait for a signal", default=True)
    class SigtermOptions:
        max_timeout: int = option("-m", "--max-timeout", default=10)

The parser backend reads the markers through :func:`verb_spec` and
:func:`argument_specs`; nothing here knows about ``argparse``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, get_type_hints

_VERB_ATTR = "__verbkit_verb__"
_METADATA_KEY = "verbkit"

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Marker records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VerbSpec:
    """How an options class is addressed on the command line."""

    name: str
    """Verb name matched against the first argument."""

    help: str | None = None
    """One-line description shown in usage output."""

    default: bool = False
    """Whether this verb parses the arguments when no verb name is given."""

    aliases: tuple[str, ...] = ()
    """Alternative names accepted in place of :attr:`name`."""

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class ArgumentSpec:
    """One field of an options class, as seen by the parser backend."""

    dest: str
    flags: tuple[str, ...]
    """Option strings such as ``("-m", "--max-timeout")``; empty for positionals."""

    annotation: Any
    default: Any = dataclasses.MISSING
    required: bool = False
    help: str | None = None
    metavar: str | None = None
    choices: tuple[Any, ...] | None = None

    @property
    def positional(self) -> bool:
        return not self.flags


# ---------------------------------------------------------------------------
# Public declarations
# ---------------------------------------------------------------------------

def verb(
    name: str,
    *,
    help: str | None = None,
    default: bool = False,
    aliases: Sequence[str] = (),
) -> Callable[[type[T]], type[T]]:
    """Mark a class as the options of the verb called *name*.

    Plain classes are turned into dataclasses so that fields declared
    with :func:`option` and :func:`value` take effect.
    """
    if not name or name.startswith("-"):
        raise ValueError(f"Invalid verb name: {name!r}")

    spec = VerbSpec(name=name, help=help, default=default, aliases=tuple(aliases))

    def decorate(cls: type[T]) -> type[T]:
        if not dataclasses.is_dataclass(cls):
            cls = dataclass(cls)
        setattr(cls, _VERB_ATTR, spec)
        return cls

    return decorate


def option(
    *flags: str,
    default: Any = dataclasses.MISSING,
    required: bool = False,
    help: str | None = None,
    metavar: str | None = None,
    choices: Sequence[Any] | None = None,
) -> Any:
    """Declare a flag option such as ``-m/--max-timeout``.

    Options without a *default* that are not *required* default to
    ``None`` (or ``False`` for ``bool`` fields, resolved by the parser).
    """
    for flag in flags:
        if not flag.startswith("-"):
            raise ValueError(f"Option flags must start with '-': {flag!r}")
    if default is dataclasses.MISSING and not required:
        default = None
    return _field(
        flags=tuple(flags),
        default=default,
        required=required,
        help=help,
        metavar=metavar,
        choices=choices,
    )


def value(
    *,
    default: Any = dataclasses.MISSING,
    help: str | None = None,
    metavar: str | None = None,
    choices: Sequence[Any] | None = None,
) -> Any:
    """Declare a positional value.  It is optional when *default* is given."""
    return _field(
        flags=(),
        default=default,
        required=default is dataclasses.MISSING,
        help=help,
        metavar=metavar,
        choices=choices,
    )


def _field(
    *,
    flags: tuple[str, ...],
    default: Any,
    required: bool,
    help: str | None,
    metavar: str | None,
    choices: Sequence[Any] | None,
) -> Any:
    metadata = {
        _METADATA_KEY: {
            "flags": flags,
            "required": required,
            "help": help,
            "metavar": metavar,
            "choices": tuple(choices) if choices is not None else None,
        }
    }
    # Mutable defaults (lists) must go through default_factory.
    if isinstance(default, (list, dict, set)):
        snapshot = default
        return dataclasses.field(
            default_factory=lambda: type(snapshot)(snapshot),
            metadata=metadata,
        )
    return dataclasses.field(default=default, metadata=metadata)


# ---------------------------------------------------------------------------
# Introspection used by the parser backend and the builder
# ---------------------------------------------------------------------------

def is_verb_options(cls: object) -> bool:
    """Return ``True`` when *cls* is a class marked with :func:`verb`."""
    return isinstance(cls, type) and isinstance(cls.__dict__.get(_VERB_ATTR), VerbSpec)


def verb_spec(cls: type) -> VerbSpec:
    """Return the :class:`VerbSpec` of a marked options class.

    Raises
    ------
    TypeError
        When *cls* was not decorated with :func:`verb`.
    """
    if not is_verb_options(cls):
        raise TypeError(f"{cls!r} is not marked with @verb")
    return cls.__dict__[_VERB_ATTR]


def argument_specs(cls: type) -> Iterator[ArgumentSpec]:
    """Yield an :class:`ArgumentSpec` for every init field of *cls*.

    Fields declared without :func:`option` or :func:`value` become long
    options named after the field (``max_timeout`` → ``--max-timeout``).
    """
    hints = _resolved_hints(cls)
    for f in dataclasses.fields(cls):
        if not f.init:
            continue

        default: Any = f.default
        if default is dataclasses.MISSING and f.default_factory is not dataclasses.MISSING:
            default = f.default_factory()

        meta = f.metadata.get(_METADATA_KEY)
        if meta is None:
            yield ArgumentSpec(
                dest=f.name,
                flags=("--" + f.name.replace("_", "-"),),
                annotation=hints.get(f.name, f.type),
                default=None if default is dataclasses.MISSING else default,
                required=default is dataclasses.MISSING,
            )
            continue

        yield ArgumentSpec(
            dest=f.name,
            flags=meta["flags"],
            annotation=hints.get(f.name, f.type),
            default=default,
            required=meta["required"],
            help=meta["help"],
            metavar=meta["metavar"],
            choices=meta["choices"],
        )


def _resolved_hints(cls: type) -> dict[str, Any]:
    """Resolve string annotations (``from __future__ import annotations``)."""
    try:
        return get_type_hints(cls)
    except NameError:
        # Forward references the module cannot resolve; fall back to raw strings.
        return {}
