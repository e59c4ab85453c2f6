"""Verification helpers for :class:`~contract_mox.controller.Mock`."""

from __future__ import annotations

import dataclasses as dc
import typing as t
from textwrap import indent

from .errors import VerificationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import Mock
    from .expectations import CallPattern, Times
    from .journal import Invocation, InvocationLog
    from .registry import Setup


@dc.dataclass(frozen=True, slots=True)
class ExpectedCall:
    """A pattern expected on a particular mock, used for ordering checks."""

    mock: Mock[t.Any]
    pattern: CallPattern

    def describe(self) -> str:
        """Return ``mock.member(args)`` for diagnostics."""
        return f"{self.mock.name}.{self.pattern.describe()}"


def _describe_invocations(invocations: t.Sequence[Invocation]) -> str:
    if not invocations:
        return "(none)"
    return "\n".join(inv.describe() for inv in invocations)


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_setup(setup: Setup) -> str:
    line = f"{setup.accessor} {setup.pattern.describe()}"
    if setup.verify_message:
        line += f"\n{setup.verify_message}"
    return line


class CountVerifier:
    """Check the number of invocations matching a pattern."""

    def verify(
        self,
        journal: InvocationLog,
        pattern: CallPattern,
        times: Times,
        *,
        mock_name: str,
        message: str | None = None,
    ) -> None:
        """Raise ``VerificationError`` unless the count satisfies *times*."""
        matched = journal.matching(pattern)
        observed = len(matched)
        if times.matches(observed):
            journal.mark_verified(matched)
            return
        recorded = journal.for_member(pattern.member, pattern.accessor)
        msg = _format_sections(
            f"Verification failed for {mock_name}.",
            [
                ("Expected", f"{pattern.describe()} {times}"),
                ("Observed calls", f"{observed} (expected {times})"),
                ("Recorded invocations", _describe_invocations(recorded)),
                ("Message", message or ""),
            ],
        )
        raise VerificationError(
            msg,
            member=pattern.member,
            pattern=pattern.describe(),
            expected=times,
            observed=observed,
            message=message,
        )


class SetupVerifier:
    """Check that setups were exercised at least once.

    By default only setups marked ``verifiable()`` are considered; with
    ``include_all`` every setup not overridden by an identical later one is.
    """

    def __init__(self, *, include_all: bool = False) -> None:
        self._include_all = include_all

    def verify(self, setups: t.Iterable[Setup], *, mock_name: str) -> None:
        """Raise ``VerificationError`` listing setups that were never hit."""
        pending = [
            setup
            for setup in setups
            if setup.overridden_by is None
            and (self._include_all or setup.is_verifiable)
            and setup.hits == 0
        ]
        if not pending:
            return
        msg = _format_sections(
            f"Setups of {mock_name} were never matched.",
            [("Unmatched setups", _numbered([_describe_setup(s) for s in pending]))],
        )
        raise VerificationError(msg, observed=0)


class NoOtherCallsVerifier:
    """Check that every invocation was covered by a verification."""

    def verify(self, journal: InvocationLog, *, mock_name: str) -> None:
        """Raise ``VerificationError`` listing unverified invocations."""
        extras = journal.unverified()
        if not extras:
            return
        msg = _format_sections(
            f"Unexpected invocations of {mock_name}.",
            [("Unverified calls", _numbered([inv.describe() for inv in extras]))],
        )
        raise VerificationError(msg, observed=len(extras))


class OrderVerifier:
    """Validate that expected calls happened in the given order.

    The calls must appear as a subsequence of all recorded invocations
    (across mocks, by ordinal); unrelated invocations in between are ignored.
    """

    def __init__(self, calls: t.Sequence[ExpectedCall]) -> None:
        self._calls = list(calls)

    def verify(self) -> None:
        """Raise ``VerificationError`` at the first call out of order."""
        cursor = 0
        for index, call in enumerate(self._calls):
            later = [
                inv
                for inv in call.mock.journal.matching(call.pattern)
                if inv.ordinal > cursor
            ]
            if not later:
                self._fail(index)
            cursor = later[0].ordinal
        for call in self._calls:
            call.mock.journal.mark_verified(call.mock.journal.matching(call.pattern))

    def _observed_order(self) -> list[str]:
        mocks = {id(call.mock): call.mock for call in self._calls}
        members = {(id(call.mock), call.pattern.member) for call in self._calls}
        observed = [
            (inv.ordinal, f"{mock.name}.{inv.describe()}")
            for mock in mocks.values()
            for inv in mock.journal
            if (id(mock), inv.member) in members
        ]
        return [text for _, text in sorted(observed)]

    def _fail(self, index: int) -> t.NoReturn:
        expected = [call.describe() for call in self._calls]
        msg = _format_sections(
            "Ordered expectation violated.",
            [
                ("Expected order", _numbered(expected)),
                ("Observed order", _numbered(self._observed_order())),
                ("First missing", f"position {index + 1}: {expected[index]}"),
            ],
        )
        raise VerificationError(msg, pattern=expected[index])


__all__ = [
    "CountVerifier",
    "ExpectedCall",
    "NoOtherCallsVerifier",
    "OrderVerifier",
    "SetupVerifier",
]
