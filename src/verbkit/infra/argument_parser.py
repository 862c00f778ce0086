"""argparse-backed implementation of :class:`~verbkit.core.protocols.ArgumentParser`.

Every ``@verb`` options class becomes one sub-parser.  The first argument
selects the verb by name or alias; when it does not name a verb, the
default verb (if one is declared) parses the whole argument list.

argparse normally calls ``sys.exit`` on errors and after printing help.
Here those paths raise :class:`~verbkit.exceptions.ArgumentParseError` /
:class:`~verbkit.exceptions.HelpRequested` instead, which :meth:`parse`
turns into a failed :class:`~verbkit.core.models.ParseResult`.  Usage and
help text go to stderr.
"""

from __future__ import annotations

import argparse
import dataclasses
import enum
import logging
import sys
import types
from collections.abc import Sequence
from typing import IO, Any, NoReturn, Union, get_args, get_origin

from verbkit.core.models import ParseOutcome, ParseResult
from verbkit.core.options import ArgumentSpec, argument_specs, is_verb_options, verb_spec
from verbkit.exceptions import ArgumentParseError, HelpRequested

logger = logging.getLogger(__name__)

_TRUE = frozenset({"1", "true", "yes", "on", "y"})
_FALSE = frozenset({"0", "false", "no", "off", "n"})


# ---------------------------------------------------------------------------
# argparse plumbing
# ---------------------------------------------------------------------------

class _NonExitingParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of terminating the process."""

    def print_help(self, file: IO[str] | None = None) -> None:
        super().print_help(file or sys.stderr)

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise ArgumentParseError(f"{self.prog}: error: {message}")

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        if message:
            sys.stderr.write(message)
        raise HelpRequested("Help requested.")


class _VersionAction(argparse.Action):
    def __init__(
        self,
        option_strings: Sequence[str],
        version: str,
        dest: str = argparse.SUPPRESS,
        default: Any = argparse.SUPPRESS,
        help: str | None = "show program's version number and exit",
    ) -> None:
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)
        self.version = version

    def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace,
                 values: Any, option_string: str | None = None) -> None:
        sys.stderr.write(f"{self.version}\n")
        raise HelpRequested("Version requested.", version=True)


# ---------------------------------------------------------------------------
# Public parser
# ---------------------------------------------------------------------------

class ArgparseParser:
    """Parse arguments against a set of ``@verb`` options classes.

    Parameters
    ----------
    prog:
        Program name shown in usage text.  Defaults to ``sys.argv[0]``.
    description:
        Text shown by the top-level ``--help``.
    version:
        When set, ``--version`` prints ``"<prog> <version>"`` and reports a
        :attr:`~verbkit.core.models.ParseOutcome.VERSION` outcome.
    """

    def __init__(
        self,
        prog: str | None = None,
        *,
        description: str | None = None,
        version: str | None = None,
    ) -> None:
        self._prog = prog
        self._description = description
        self._version = version

    def parse(self, args: Sequence[str], kinds: Sequence[type]) -> ParseResult:
        args = list(args)
        try:
            kind, namespace = self._select(args, kinds)
        except HelpRequested as exc:
            outcome = ParseOutcome.VERSION if exc.version else ParseOutcome.HELP
            return ParseResult.failure(str(exc), outcome)
        except ArgumentParseError as exc:
            return ParseResult.failure(str(exc))

        try:
            value = kind(**vars(namespace))
        except (TypeError, ValueError) as exc:
            # Raised by the options class itself, e.g. from __post_init__.
            return ParseResult.failure(f"Invalid options for {verb_spec(kind).name}: {exc}")
        return ParseResult.success(kind, value)

    # ------------------------------------------------------------------
    # Verb selection
    # ------------------------------------------------------------------

    def _select(self, args: list[str], kinds: Sequence[type]) -> tuple[type, argparse.Namespace]:
        root = self._build_root()
        subparsers = root.add_subparsers(dest="verb", metavar="<verb>", title="verbs")

        by_name: dict[str, tuple[type, argparse.ArgumentParser]] = {}
        default: tuple[type, argparse.ArgumentParser] | None = None
        for kind in kinds:
            if not is_verb_options(kind):
                logger.debug("Skipping %r: not an @verb options class", kind)
                continue
            spec = verb_spec(kind)
            sub = subparsers.add_parser(
                spec.name,
                aliases=list(spec.aliases),
                help=spec.help,
                description=spec.help,
            )
            self._add_version(sub)
            for argument in argument_specs(kind):
                _add_argument(sub, argument)
            for name in spec.names:
                by_name[name] = (kind, sub)
            if spec.default:
                default = (kind, sub)

        if args and args[0] in by_name:
            kind, sub = by_name[args[0]]
            return kind, sub.parse_args(args[1:])

        if default is not None and not (args and args[0] in ("-h", "--help")):
            kind, sub = default
            return kind, sub.parse_args(args)

        # No verb matched: let the root parser report help, version or the error.
        root.parse_args(args)
        raise ArgumentParseError(
            "No verb selected." if not args else f"Unknown verb: {args[0]!r}",
        )

    def _build_root(self) -> argparse.ArgumentParser:
        root = _NonExitingParser(prog=self._prog, description=self._description)
        self._add_version(root)
        return root

    def _add_version(self, parser: argparse.ArgumentParser) -> None:
        if self._version is not None:
            prog = self._prog or parser.prog.split()[0]
            parser.add_argument("--version", action=_VersionAction, version=f"{prog} {self._version}")


# ---------------------------------------------------------------------------
# Field → add_argument translation
# ---------------------------------------------------------------------------

def _add_argument(parser: argparse.ArgumentParser, spec: ArgumentSpec) -> None:
    annotation, is_list = _unwrap(spec.annotation)
    kwargs: dict[str, Any] = {"help": spec.help}
    if spec.metavar is not None:
        kwargs["metavar"] = spec.metavar
    if spec.choices is not None:
        kwargs["choices"] = spec.choices

    if annotation is bool and not is_list:
        if spec.positional:
            kwargs["type"] = _to_bool
        elif spec.default is True:
            kwargs["action"] = argparse.BooleanOptionalAction
            kwargs["default"] = True
        else:
            kwargs["action"] = "store_true"
            kwargs["default"] = False
    else:
        converter = _converter(annotation)
        if converter is not None:
            kwargs["type"] = converter
        if isinstance(annotation, type) and issubclass(annotation, enum.Enum) and spec.choices is None:
            kwargs["choices"] = list(annotation)
            kwargs.setdefault("metavar", "{" + ",".join(m.name for m in annotation) + "}")
        if is_list:
            kwargs["nargs"] = "+" if spec.required else "*"
        elif spec.positional and not spec.required:
            kwargs["nargs"] = "?"
        if spec.default is not dataclasses.MISSING:
            kwargs["default"] = spec.default

    if spec.positional:
        kwargs.setdefault("metavar", spec.dest.upper())
        parser.add_argument(spec.dest, **kwargs)
    else:
        if "action" not in kwargs:
            kwargs["required"] = spec.required
        parser.add_argument(*spec.flags, dest=spec.dest, **kwargs)


def _unwrap(annotation: Any) -> tuple[Any, bool]:
    """Strip ``Optional`` and detect ``list[X]``; return ``(X, is_list)``."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap(members[0])
        return str, False
    if origin in (list, tuple, set, frozenset, Sequence):
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        return (args[0] if args else str), True
    return annotation, False


def _converter(annotation: Any) -> Any:
    if annotation is str or not isinstance(annotation, type):
        # Unresolved string annotations and typing constructs stay raw strings.
        return None
    if issubclass(annotation, enum.Enum):
        return _enum_converter(annotation)
    return annotation


def _enum_converter(enum_type: type[enum.Enum]) -> Any:
    def convert(raw: str) -> enum.Enum:
        try:
            return enum_type[raw]
        except KeyError:
            pass
        try:
            return enum_type(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid choice: {raw!r}") from None

    convert.__name__ = enum_type.__name__
    return convert


def _to_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got {raw!r}")
