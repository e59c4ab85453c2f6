"""Call patterns and invocation-count expectations."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from ._validators import validate_call_count, validate_count_range
from .comparators import Any, Comparator, Exact
from .contract import Accessor, Method, Param, ParamKind, Property, Slot
from .errors import ConfigurationError

OutAssignment: t.TypeAlias = tuple[int, object]


@dc.dataclass(frozen=True, slots=True)
class CallPattern:
    """Per-parameter comparators selecting invocations of one member."""

    member: str
    accessor: Accessor = Accessor.CALL
    matchers: tuple[Comparator, ...] = ()
    params: tuple[str, ...] = dc.field(default=(), compare=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def for_method(
        cls,
        method: Method,
        args: t.Sequence[object],
        kwargs: t.Mapping[str, object],
    ) -> tuple[CallPattern, tuple[OutAssignment, ...]]:
        """Compile the setup arguments for *method*.

        Returns the pattern plus any output values given at setup time, either
        as ``Out(value)`` boxes or as bare values in ``out`` positions.
        """
        try:
            bound = method.signature.bind_partial(*args, **kwargs)
        except TypeError as exc:
            msg = f"invalid arguments for {method.name!r}: {exc}"
            raise ConfigurationError(msg) from exc

        matchers: list[Comparator] = []
        outs: list[OutAssignment] = []
        for index, param in enumerate(method.params):
            if param.name in bound.arguments:
                value = bound.arguments[param.name]
            elif param.kind is ParamKind.OUT:
                value = Any()
            elif param.has_default:
                value = param.default
            else:
                msg = f"missing argument pattern for {method.name}({param.name})"
                raise ConfigurationError(msg)
            matcher, out_value = _compile_argument(param, value)
            matchers.append(matcher)
            if out_value is not _NO_OUT:
                outs.append((index, out_value))

        pattern = cls(
            method.name,
            Accessor.CALL,
            tuple(matchers),
            tuple(param.name for param in method.params),
        )
        return pattern, tuple(outs)

    @classmethod
    def for_getter(cls, prop: Property) -> CallPattern:
        """Return the pattern matching every read of *prop*."""
        return cls(prop.name, Accessor.GET)

    @classmethod
    def for_setter(cls, prop: Property, value: object) -> CallPattern:
        """Return the pattern matching writes of *value* to *prop*."""
        matcher = value if isinstance(value, Comparator) else Exact(value)
        return cls(prop.name, Accessor.SET, (matcher,), ("value",))

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def matches(self, args: t.Sequence[object]) -> bool:
        """Return ``True`` if every argument satisfies its comparator."""
        if len(args) != len(self.matchers):
            return False
        return all(
            matcher(arg) for matcher, arg in zip(self.matchers, args, strict=True)
        )

    def explain_mismatch(self, args: t.Sequence[object]) -> str:
        """Return a human readable reason why *args* do not match."""
        if len(args) != len(self.matchers):
            return f"expected {len(self.matchers)} arguments, got {len(args)}"
        for index, (matcher, arg) in enumerate(
            zip(self.matchers, args, strict=True)
        ):
            if not matcher(arg):
                label = self.params[index] if index < len(self.params) else index
                return f"arg[{label}]={arg!r} failed {matcher.describe()}"
        return "arguments match"

    def describe(self) -> str:
        """Return a readable rendering of this pattern."""
        rendered = ", ".join(matcher.describe() for matcher in self.matchers)
        if self.accessor is Accessor.CALL:
            return f"{self.member}({rendered})"
        if self.accessor is Accessor.SET:
            return f"{self.member} = {rendered}"
        if self.accessor is Accessor.GET:
            return self.member
        return f"{self.member} {self.accessor}({rendered})"


_NO_OUT: t.Final = object()


def _compile_argument(param: Param, value: object) -> tuple[Comparator, object]:
    if isinstance(value, Comparator):
        return value, _NO_OUT
    if param.kind is ParamKind.OUT:
        if isinstance(value, Slot):
            return Any(), value.value if value.is_set else _NO_OUT
        return Any(), value
    if param.kind is ParamKind.REF:
        return Exact(value, identity=True), _NO_OUT
    return Exact(value), _NO_OUT


@dc.dataclass(frozen=True, slots=True)
class Times:
    """Inclusive bounds on the number of matching invocations."""

    low: int
    high: int | None = None

    def __post_init__(self) -> None:
        if self.high is None:
            validate_call_count(self.low, "low")
        else:
            validate_count_range(self.low, self.high)

    @classmethod
    def never(cls) -> Times:
        """Expect no matching invocation."""
        return cls(0, 0)

    @classmethod
    def once(cls) -> Times:
        """Expect exactly one matching invocation."""
        return cls(1, 1)

    @classmethod
    def at_least_once(cls) -> Times:
        """Expect one or more matching invocations."""
        return cls(1)

    @classmethod
    def at_most_once(cls) -> Times:
        """Expect zero or one matching invocation."""
        return cls(0, 1)

    @classmethod
    def exactly(cls, count: int) -> Times:
        """Expect exactly *count* matching invocations."""
        validate_call_count(count)
        return cls(count, count)

    @classmethod
    def at_least(cls, count: int) -> Times:
        """Expect *count* or more matching invocations."""
        return cls(count)

    @classmethod
    def at_most(cls, count: int) -> Times:
        """Expect no more than *count* matching invocations."""
        validate_call_count(count)
        return cls(0, count)

    @classmethod
    def between(cls, low: int, high: int, *, inclusive: bool = True) -> Times:
        """Expect a count between *low* and *high*.

        With ``inclusive=False`` both bounds are excluded.
        """
        validate_count_range(low, high)
        if inclusive:
            return cls(low, high)
        if high - low < 2:
            msg = f"no count lies strictly between {low} and {high}"
            raise ValueError(msg)
        return cls(low + 1, high - 1)

    def matches(self, count: int) -> bool:
        """Return ``True`` when *count* satisfies these bounds."""
        if count < self.low:
            return False
        return self.high is None or count <= self.high

    def __str__(self) -> str:
        """Return a phrase such as ``exactly 2 times``."""
        if self.high == 0:
            return "never"
        if self.high is None:
            return f"at least {_times(self.low)}"
        if self.low == self.high:
            return f"exactly {_times(self.low)}"
        if self.low == 0:
            return f"at most {_times(self.high)}"
        return f"between {self.low} and {self.high} times"


def _times(count: int) -> str:
    return "once" if count == 1 else f"{count} times"


__all__ = ["CallPattern", "Times"]
