"""Comparator classes used for argument matching.

Every comparator is a frozen dataclass so call patterns stay data-driven:
they compare equal when configured identically and render a readable
``repr`` for verification diagnostics.
"""

from __future__ import annotations

import abc
import dataclasses as dc
import re
import typing as t

from .contract import Slot


class Comparator(abc.ABC):
    """Callable returning ``True`` when a value matches."""

    __slots__ = ()

    @abc.abstractmethod
    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""

    def describe(self) -> str:
        """Return the text used for this comparator in diagnostics."""
        return repr(self)


@dc.dataclass(frozen=True, slots=True)
class Any(Comparator):
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True


@dc.dataclass(frozen=True, slots=True)
class Exact(Comparator):
    """Match values equal to ``value``.

    With ``identity`` set the comparison is by object identity instead; this
    is how by-reference parameters are matched. ``Ref`` boxes are unwrapped on
    both sides before the identity check.
    """

    value: object
    identity: bool = False

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* equals (or is) the expected value."""
        if self.identity:
            return _unwrap(value) is _unwrap(self.value)
        return bool(value == self.value)

    def describe(self) -> str:
        """Render literals the way they were written in the setup."""
        if self.identity:
            return f"Same({_unwrap(self.value)!r})"
        return repr(self.value)


@dc.dataclass(frozen=True, slots=True)
class IsA(Comparator):
    """Match instances of ``typ``."""

    typ: type | tuple[type, ...]

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        return isinstance(value, self.typ)


@dc.dataclass(frozen=True, slots=True, init=False)
class IsIn(Comparator):
    """Match values equal to one of ``values``."""

    values: tuple[object, ...]

    def __init__(self, *values: object) -> None:
        object.__setattr__(self, "values", values)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* equals any candidate."""
        return any(value == candidate for candidate in self.values)


@dc.dataclass(frozen=True, slots=True)
class Range(Comparator):
    """Match values between ``low`` and ``high``.

    Each bound carries its own inclusive flag. Values that cannot be ordered
    against the bounds (``None`` for an integer range, say) never match.
    """

    low: t.Any
    high: t.Any
    include_low: bool = True
    include_high: bool = True

    @classmethod
    def exclusive(cls, low: t.Any, high: t.Any) -> Range:
        """Return a range excluding both bounds."""
        return cls(low, high, include_low=False, include_high=False)

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if *value* lies within the configured bounds."""
        try:
            above = value >= self.low if self.include_low else value > self.low
            below = value <= self.high if self.include_high else value < self.high
        except TypeError:
            return False
        return bool(above and below)


@dc.dataclass(frozen=True, slots=True)
class Regex(Comparator):
    """Match strings that match ``pattern`` in full."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the whole of *value* matches the pattern."""
        if not isinstance(value, str):
            return False
        return self._compiled.fullmatch(value) is not None


@dc.dataclass(frozen=True, slots=True)
class Contains(Comparator):
    """Match if ``item`` is found in *value*."""

    item: object

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class StartsWith(Comparator):
    """Match strings beginning with ``prefix``."""

    prefix: str

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class Predicate(Comparator):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))


def _unwrap(value: object) -> object:
    return value.value if isinstance(value, Slot) else value


__all__ = [
    "Any",
    "Comparator",
    "Contains",
    "Exact",
    "IsA",
    "IsIn",
    "Predicate",
    "Range",
    "Regex",
    "StartsWith",
]
