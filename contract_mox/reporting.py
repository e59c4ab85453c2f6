"""Sinks receiving failures and advisories raised by mocks."""

from __future__ import annotations

import logging
import typing as t
import warnings

from .errors import AdvisoryWarning

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .errors import ContractMoxError

logger = logging.getLogger(__name__)


class Reporter(t.Protocol):
    """Destination for mock failures (test fails) and advisories (test warns)."""

    def fail(self, error: ContractMoxError) -> None:
        """Report a fatal *error*."""
        ...

    def warn(self, error: ContractMoxError, *, stacklevel: int = 2) -> None:
        """Report *error* as a non-fatal advisory.

        *stacklevel* follows :func:`warnings.warn`: ``2`` names the caller.
        """
        ...


class RaisingReporter:
    """Raise failures and emit advisories as :class:`AdvisoryWarning`."""

    def fail(self, error: ContractMoxError) -> None:
        """Raise *error*."""
        raise error

    def warn(self, error: ContractMoxError, *, stacklevel: int = 2) -> None:
        """Log *error* and issue an :class:`AdvisoryWarning`."""
        logger.warning("Advisory verification failure: %s", error)
        warnings.warn(str(error), AdvisoryWarning, stacklevel=stacklevel)


class CollectingReporter:
    """Store failures and advisories instead of raising them."""

    def __init__(self) -> None:
        self.failures: list[ContractMoxError] = []
        self.advisories: list[ContractMoxError] = []

    def fail(self, error: ContractMoxError) -> None:
        """Record a failure."""
        self.failures.append(error)

    def warn(self, error: ContractMoxError, *, stacklevel: int = 2) -> None:
        """Record an advisory."""
        del stacklevel
        self.advisories.append(error)


__all__ = ["CollectingReporter", "RaisingReporter", "Reporter"]
