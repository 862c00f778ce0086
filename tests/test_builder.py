"""Tests for the verb registry (core/builder.py).

Coverage:
* Options type derivation from ``Verb[...]`` bases and its failures.
* Explicit registration and container wiring.
* Eager rejection of clashing registrations.
* Run settings and freezing.
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar
from unittest.mock import MagicMock

import pytest

from verbkit.core.builder import CommandLineBuilder, options_type_of
from verbkit.core.cancellation import CancellationToken
from verbkit.core.options import verb
from verbkit.core.verbs import BooleanVerb, SyncVerb, Verb
from verbkit.exceptions import ConfigurationError, DuplicateVerbError, VerbContractError

T = TypeVar("T")


@verb("build", default=True)
class BuildOptions:
    target: str = "all"


@verb("check", aliases=("c",))
class CheckOptions:
    pattern: str = "*"


@verb("tidy", aliases=("c",))
class TidyOptions:
    pass


@verb("lint", default=True)
class LintOptions:
    pass


class NotMarked:
    pass


class BuildVerb(Verb[BuildOptions]):
    async def run(self, options: BuildOptions, token: CancellationToken) -> int:
        return 0


class CheckVerb(BooleanVerb[CheckOptions]):
    async def execute(self, options: CheckOptions, token: CancellationToken) -> bool:
        return True


class SubCheckVerb(CheckVerb):
    pass


class TidyVerb(SyncVerb[TidyOptions]):
    def run_sync(self, options: TidyOptions) -> int:
        return 0


class GenericVerb(BooleanVerb[T], Generic[T]):
    async def execute(self, options: T, token: CancellationToken) -> bool:
        return True


class UnmarkedVerb(SyncVerb[NotMarked]):
    def run_sync(self, options: NotMarked) -> int:
        return 0


class SyncStub:
    pass


class NotAVerb:
    async def run(self, options: BuildOptions, token: CancellationToken) -> int:
        return 0


@pytest.fixture()
def container() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def builder(container: MagicMock) -> CommandLineBuilder:
    return CommandLineBuilder(container)


# ---------------------------------------------------------------------------
# Options type derivation
# ---------------------------------------------------------------------------

class TestOptionsTypeOf:
    @pytest.mark.parametrize(
        ("handler", "expected"),
        [
            (BuildVerb, BuildOptions),
            (CheckVerb, CheckOptions),
            (SubCheckVerb, CheckOptions),
            (TidyVerb, TidyOptions),
        ],
    )
    def test_derives_options(self, handler: type, expected: type) -> None:
        assert options_type_of(handler) is expected

    def test_rejects_non_verb(self) -> None:
        with pytest.raises(ConfigurationError, match="must implement Verb"):
            options_type_of(NotAVerb)

    def test_rejects_unparameterised_verb(self) -> None:
        with pytest.raises(ConfigurationError, match="parameterised"):
            options_type_of(GenericVerb)

    def test_rejects_unmarked_options(self) -> None:
        with pytest.raises(ConfigurationError, match="@verb"):
            options_type_of(UnmarkedVerb)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class TestAdd:
    def test_add_derives_and_registers(self, builder: CommandLineBuilder, container: MagicMock) -> None:
        assert builder.add(BuildVerb) is builder
        (registration,) = builder.verbs
        assert registration.options is BuildOptions
        assert registration.handler is BuildVerb
        container.register.assert_called_once_with(BuildVerb, BuildVerb)

    def test_add_explicit_skips_derivation(self, builder: CommandLineBuilder) -> None:
        builder.add(NotAVerb, BuildOptions)
        assert builder.verbs[0].handler is NotAVerb

    def test_registration_order_is_kept(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb).add(CheckVerb).add(SyncStub, NotMarked)
        assert [reg.options for reg in builder.verbs] == [BuildOptions, CheckOptions, NotMarked]
        assert builder.verbs[2].handler is SyncStub

    def test_config_error_is_raised_from_add(self, builder: CommandLineBuilder) -> None:
        with pytest.raises(ConfigurationError):
            builder.add(NotAVerb)
        assert builder.verbs == ()

    def test_requires_container(self) -> None:
        with pytest.raises(ConfigurationError):
            CommandLineBuilder(None)  # type: ignore[arg-type]


class TestDuplicates:
    def test_same_options_twice(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        with pytest.raises(DuplicateVerbError):
            builder.add(BuildVerb)

    def test_same_options_different_handler(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        with pytest.raises(DuplicateVerbError):
            builder.add(NotAVerb, BuildOptions)

    def test_alias_clash(self, builder: CommandLineBuilder) -> None:
        builder.add(CheckVerb)
        with pytest.raises(DuplicateVerbError, match="'c'"):
            builder.add(TidyVerb)

    def test_two_default_verbs(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        with pytest.raises(DuplicateVerbError, match="default"):
            builder.add(NotAVerb, LintOptions)

    def test_duplicate_is_a_configuration_error(self) -> None:
        assert issubclass(DuplicateVerbError, ConfigurationError)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self, builder: CommandLineBuilder) -> None:
        assert builder.exit_code_success == 0
        assert builder.exit_code_failure == 1
        assert builder.token is None

    def test_exit_code(self, builder: CommandLineBuilder) -> None:
        assert builder.exit_code(success=10, failure=20) is builder
        assert (builder.exit_code_success, builder.exit_code_failure) == (10, 20)

    def test_exit_code_resets_to_defaults(self, builder: CommandLineBuilder) -> None:
        builder.exit_code(5, 6).exit_code()
        assert (builder.exit_code_success, builder.exit_code_failure) == (0, 1)

    def test_cancel_token(self, builder: CommandLineBuilder) -> None:
        token = CancellationToken()
        assert builder.cancel_token(token) is builder
        assert builder.token is token
        builder.cancel_token()
        assert builder.token is None

    def test_frozen_builder_rejects_changes(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        builder.freeze()
        assert builder.frozen
        with pytest.raises(ConfigurationError):
            builder.add(CheckVerb)
        with pytest.raises(ConfigurationError):
            builder.exit_code(3, 4)
        with pytest.raises(ConfigurationError):
            builder.cancel_token(CancellationToken())
        assert len(builder.verbs) == 1


# ---------------------------------------------------------------------------
# Invoker
# ---------------------------------------------------------------------------

class TestInvoker:
    def test_calls_run(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        invoke = builder.verbs[0].invoke
        code = asyncio.run(invoke(BuildVerb(), BuildOptions(), CancellationToken.none()))
        assert code == 0

    def test_rejects_foreign_options(self, builder: CommandLineBuilder) -> None:
        builder.add(BuildVerb)
        with pytest.raises(VerbContractError, match="Expected BuildOptions"):
            builder.verbs[0].invoke(BuildVerb(), CheckOptions(), CancellationToken.none())

    def test_rejects_handler_without_run(self, builder: CommandLineBuilder) -> None:
        builder.add(SyncStub, BuildOptions)
        with pytest.raises(VerbContractError, match="Could not find run method"):
            builder.verbs[0].invoke(SyncStub(), BuildOptions(), CancellationToken.none())

    def test_rejects_run_with_wrong_arity(self, builder: CommandLineBuilder) -> None:
        class OneArgument:
            async def run(self, options: BuildOptions) -> int:
                return 0

        builder.add(OneArgument, BuildOptions)
        with pytest.raises(VerbContractError, match=r"does not accept \(options, token\)"):
            builder.verbs[0].invoke(OneArgument(), BuildOptions(), CancellationToken.none())

    def test_rejects_sync_run_without_calling_it(self, builder: CommandLineBuilder) -> None:
        calls: list[str] = []

        class Blocking:
            def run(self, options: BuildOptions, token: CancellationToken) -> int:
                calls.append("ran")
                return 0

        builder.add(Blocking, BuildOptions)
        with pytest.raises(VerbContractError, match="does not return an awaitable"):
            builder.verbs[0].invoke(Blocking(), BuildOptions(), CancellationToken.none())
        assert calls == []
