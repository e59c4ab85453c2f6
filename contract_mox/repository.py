"""Factories sharing settings across mocks and verifying them together."""

from __future__ import annotations

import logging
import typing as t

from .controller import Mock, MockBehavior
from .defaults import DefaultValue
from .errors import AggregateVerificationError, VerificationError
from .reporting import RaisingReporter, Reporter
from .verifiers import OrderVerifier, _format_sections, _numbered

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Contract
    from .verifiers import ExpectedCall

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class MockRepository:
    """Create mocks with shared defaults and verify all of them at once.

    Verification failures of every mock are gathered into a single
    :class:`~contract_mox.errors.AggregateVerificationError` so one test run
    reports everything that went wrong.
    """

    def __init__(
        self,
        behavior: MockBehavior | str = MockBehavior.STRICT,
        *,
        default_value: DefaultValue | str = DefaultValue.ZERO,
        reporter: Reporter | None = None,
    ) -> None:
        self.behavior = MockBehavior(behavior)
        self.default_value = DefaultValue(default_value)
        self.reporter: Reporter = (
            reporter if reporter is not None else RaisingReporter()
        )
        self._mocks: list[Mock[t.Any]] = []

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"<MockRepository behavior={self.behavior} "
            f"default_value={self.default_value} mocks={len(self._mocks)}>"
        )

    @property
    def mocks(self) -> tuple[Mock[t.Any], ...]:
        """Return the mocks created so far, oldest first."""
        return tuple(self._mocks)

    def create(
        self,
        contract: type[T] | Contract,
        *,
        behavior: MockBehavior | str | None = None,
        default_value: DefaultValue | str | None = None,
        name: str | None = None,
    ) -> Mock[T]:
        """Create a mock using the repository defaults unless overridden."""
        mock: Mock[T] = Mock(
            contract,
            behavior=self.behavior if behavior is None else behavior,
            default_value=(
                self.default_value if default_value is None else default_value
            ),
            reporter=self.reporter,
            name=name,
        )
        self._mocks.append(mock)
        logger.debug("Repository created %r", mock)
        return mock

    def of(self, contract: type[T] | Contract, **values: object) -> T:
        """Return the object of a loose mock whose properties hold *values*."""
        mock = self.create(contract, behavior=MockBehavior.LOOSE)
        for name, value in values.items():
            mock.setup_property(name, value)
        return mock.object

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(self) -> None:
        """Verify the ``verifiable()`` setups of every mock."""
        self._verify_each("verify", lambda mock: mock.check_setups())

    def verify_all(self) -> None:
        """Verify every non-overridden setup of every mock."""
        self._verify_each(
            "verify_all", lambda mock: mock.check_setups(include_all=True)
        )

    def verify_no_other_calls(self) -> None:
        """Verify that no mock recorded calls left unverified."""
        self._verify_each(
            "verify_no_other_calls", lambda mock: mock.check_no_other_calls()
        )

    def verify_in_order(self, *calls: ExpectedCall) -> None:
        """Verify that *calls* happened in this order across mocks."""
        try:
            OrderVerifier(calls).verify()
        except VerificationError as err:
            self.reporter.fail(err)

    def _verify_each(
        self, operation: str, check: t.Callable[[Mock[t.Any]], None]
    ) -> None:
        failures: list[VerificationError] = []
        for mock in self._mocks:
            try:
                check(mock)
            except VerificationError as err:
                failures.append(err)
        if not failures:
            return
        logger.debug("%s found %d failing mock(s)", operation, len(failures))
        msg = _format_sections(
            f"{operation}() failed for {len(failures)} of {len(self._mocks)} mocks.",
            [("Failures", _numbered([str(err) for err in failures]))],
        )
        self.reporter.fail(AggregateVerificationError(msg, failures))


__all__ = ["MockRepository"]
