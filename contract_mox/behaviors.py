"""Actions executed when a setup governs an invocation."""

from __future__ import annotations

import dataclasses as dc
import enum
import inspect
import logging
import typing as t

from .contract import Slot

logger = logging.getLogger(__name__)


class CallbackPosition(enum.StrEnum):
    """When a callback runs relative to the value-producing action."""

    BEFORE = "before"
    AFTER = "after"


def call_adapted(func: t.Callable[..., t.Any], args: t.Sequence[object]) -> t.Any:
    """Call *func* with *args*, or with nothing if it takes no parameters."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return func(*args)
    if args and not signature.parameters:
        return func()
    return func(*args)


@dc.dataclass(frozen=True, slots=True)
class ReturnValue:
    """Produce a literal value or the result of ``factory(*args)``."""

    value: object = None
    factory: t.Callable[..., object] | None = None

    def produce(self, args: t.Sequence[object]) -> object:
        """Return the configured value for this call."""
        if self.factory is not None:
            return call_adapted(self.factory, args)
        return self.value


@dc.dataclass(frozen=True, slots=True)
class ThrowFailure:
    """Raise ``kind`` (an exception class or instance) to the caller."""

    kind: type[BaseException] | BaseException
    message: str | t.Callable[..., str] | None = None

    def build(self, args: t.Sequence[object]) -> BaseException:
        """Return the exception to raise for this call."""
        if isinstance(self.kind, BaseException):
            return self.kind
        message = self.message
        if callable(message):
            message = call_adapted(message, args)
        return self.kind() if message is None else self.kind(message)


@dc.dataclass(frozen=True, slots=True)
class Callback:
    """Run ``func`` with the call's arguments before or after the outcome."""

    func: t.Callable[..., object]
    position: CallbackPosition = CallbackPosition.AFTER


@dc.dataclass(frozen=True, slots=True)
class AssignOut:
    """Write ``value`` into the output slot at ``index``."""

    index: int
    value: object

    def apply(self, args: t.Sequence[object]) -> None:
        """Store the value in the caller's slot."""
        slot = args[self.index]
        if not isinstance(slot, Slot):
            msg = (
                f"output argument {self.index} must be an Out or Ref slot, "
                f"got {type(slot).__name__}"
            )
            raise TypeError(msg)
        slot.value = self.value


@dc.dataclass(frozen=True, slots=True)
class RaiseEvent:
    """Fire ``event`` with ``args`` once the call's outcome is known."""

    event: str
    args: tuple[object, ...] = ()


Action: t.TypeAlias = ReturnValue | ThrowFailure | Callback | AssignOut | RaiseEvent


class BehaviorChain:
    """Ordered actions attached to a single setup.

    The whole chain runs again on every matching call; factories and
    callbacks are never cached.
    """

    def __init__(self) -> None:
        self._actions: list[Action] = []

    @property
    def actions(self) -> tuple[Action, ...]:
        """Return the actions in declaration order."""
        return tuple(self._actions)

    @property
    def outcome(self) -> ReturnValue | ThrowFailure | None:
        """Return the last declared value-producing action, if any."""
        for action in reversed(self._actions):
            if isinstance(action, ReturnValue | ThrowFailure):
                return action
        return None

    def add(self, action: Action) -> None:
        """Append *action* to the chain."""
        self._actions.append(action)

    def execute(
        self,
        args: t.Sequence[object],
        *,
        raise_event: t.Callable[[str, tuple[object, ...]], None],
        default: t.Callable[[], object],
    ) -> object:
        """Run the chain for one call and return its result.

        Order: ``before`` callbacks, output assignments, the outcome, then
        ``after`` callbacks and events in declaration order. A configured
        failure propagates straight after the assignments.
        """
        for action in self._actions:
            if (
                isinstance(action, Callback)
                and action.position is CallbackPosition.BEFORE
            ):
                call_adapted(action.func, args)

        for action in self._actions:
            if isinstance(action, AssignOut):
                action.apply(args)

        outcome = self.outcome
        if isinstance(outcome, ThrowFailure):
            raise outcome.build(args)
        result = default() if outcome is None else outcome.produce(args)

        for action in self._actions:
            if (
                isinstance(action, Callback)
                and action.position is CallbackPosition.AFTER
            ):
                call_adapted(action.func, args)
            elif isinstance(action, RaiseEvent):
                logger.debug("Setup raising event %s%r", action.event, action.args)
                raise_event(action.event, action.args)
        return result


__all__ = [
    "Action",
    "AssignOut",
    "BehaviorChain",
    "Callback",
    "CallbackPosition",
    "RaiseEvent",
    "ReturnValue",
    "ThrowFailure",
    "call_adapted",
]
