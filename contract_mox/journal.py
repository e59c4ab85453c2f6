"""Append-only record of the invocations made against a mock."""

from __future__ import annotations

import dataclasses as dc
import itertools
import typing as t

from .contract import Accessor

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import CallPattern

_REPR_FIELD_LIMIT: t.Final[int] = 80

# Process-wide ordinal so invocations on different mocks can be ordered.
_ORDINALS = itertools.count(1)


def _shorten(text: str, limit: int = _REPR_FIELD_LIMIT) -> str:
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 1]}…"


@dc.dataclass(frozen=True, slots=True)
class Invocation:
    """One recorded access to a contract member."""

    member: str
    accessor: Accessor
    args: tuple[object, ...]
    sequence: int
    ordinal: int

    def describe(self) -> str:
        """Return a readable rendering such as ``do_something('ping')``."""
        rendered = ", ".join(_shorten(repr(arg)) for arg in self.args)
        if self.accessor is Accessor.CALL:
            return f"{self.member}({rendered})"
        if self.accessor is Accessor.GET:
            return self.member
        if self.accessor is Accessor.SET:
            return f"{self.member} = {rendered}"
        return f"{self.member} {self.accessor}({rendered})"


class InvocationLog:
    """Invocations of one mock in the order they happened.

    Entries are never removed. The log additionally remembers which entries
    have been matched by a successful verification so that
    ``verify_no_other_calls`` can report the rest.
    """

    def __init__(self, sequence: t.Callable[[], int]) -> None:
        self._sequence = sequence
        self._entries: list[Invocation] = []
        self._verified: set[int] = set()

    def record(
        self, member: str, accessor: Accessor, args: t.Sequence[object] = ()
    ) -> Invocation:
        """Append and return a new invocation."""
        invocation = Invocation(
            member,
            accessor,
            tuple(args),
            self._sequence(),
            next(_ORDINALS),
        )
        self._entries.append(invocation)
        return invocation

    def __iter__(self) -> t.Iterator[Invocation]:
        """Iterate over invocations in call order."""
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        """Return the number of recorded invocations."""
        return len(self._entries)

    def __getitem__(self, index: int) -> Invocation:
        """Return the invocation at *index*."""
        return self._entries[index]

    def for_member(
        self, member: str, accessor: Accessor | None = None
    ) -> list[Invocation]:
        """Return invocations of *member*, optionally for one accessor."""
        return [
            inv
            for inv in self._entries
            if inv.member == member and (accessor is None or inv.accessor is accessor)
        ]

    def matching(self, pattern: CallPattern) -> list[Invocation]:
        """Return invocations satisfying *pattern*."""
        return [
            inv
            for inv in self.for_member(pattern.member, pattern.accessor)
            if pattern.matches(inv.args)
        ]

    def mark_verified(self, invocations: t.Iterable[Invocation]) -> None:
        """Remember that *invocations* were covered by a verification."""
        self._verified.update(inv.sequence for inv in invocations)

    def unverified(self) -> list[Invocation]:
        """Return invocations no successful verification has matched."""
        return [inv for inv in self._entries if inv.sequence not in self._verified]


__all__ = ["Invocation", "InvocationLog"]
