"""Exception hierarchy for contract-mox."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Times


class ContractMoxError(Exception):
    """Base class for all contract-mox errors."""


class ConfigurationError(ContractMoxError):
    """Raised when a mock is configured against its contract incorrectly."""


class ConfigurationMissingError(ContractMoxError):
    """Raised by strict mocks when no setup governs an invocation."""

    def __init__(self, message: str, *, member: str, accessor: str) -> None:
        super().__init__(message)
        self.member = member
        self.accessor = accessor


class VerificationError(ContractMoxError, AssertionError):
    """Raised when recorded usage does not satisfy a verification request.

    ``expected`` and ``observed`` are populated for count based checks; setup
    and no-other-calls checks leave them as ``None``.
    """

    def __init__(
        self,
        diagnostic: str,
        *,
        member: str | None = None,
        pattern: str | None = None,
        expected: Times | None = None,
        observed: int | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(diagnostic)
        self.member = member
        self.pattern = pattern
        self.expected = expected
        self.observed = observed
        self.message = message


class AggregateVerificationError(VerificationError):
    """Bundle of independent verification failures from several mocks."""

    def __init__(
        self, diagnostic: str, failures: t.Sequence[VerificationError]
    ) -> None:
        super().__init__(diagnostic)
        self.failures = tuple(failures)


class AdvisoryWarning(UserWarning):
    """Emitted for verification failures reported as advisories."""


__all__ = [
    "AdvisoryWarning",
    "AggregateVerificationError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "ContractMoxError",
    "VerificationError",
]
