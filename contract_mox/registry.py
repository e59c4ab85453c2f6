"""Setups and the registry resolving which setup governs a call."""

from __future__ import annotations

import logging
import typing as t
from collections import defaultdict

from .behaviors import (
    AssignOut,
    BehaviorChain,
    Callback,
    CallbackPosition,
    RaiseEvent,
    ReturnValue,
    ThrowFailure,
)
from .contract import Accessor, Contract, Event, Method, ParamKind, Property
from .errors import ConfigurationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .expectations import CallPattern, OutAssignment

logger = logging.getLogger(__name__)


class Setup:
    """A configured ``pattern -> behaviour`` rule for one contract member.

    Configuration methods return the setup itself so calls can be chained::

        mock.setup("get_count").returns_from(lambda: calls).callback(bump)
    """

    def __init__(
        self,
        contract: Contract,
        member: Member,
        pattern: CallPattern,
        sequence: int,
    ) -> None:
        self.contract = contract
        self.member = member
        self.pattern = pattern
        self.sequence = sequence
        self.behavior = BehaviorChain()
        self.hits = 0
        self.is_verifiable = False
        self.verify_message: str | None = None
        self.overridden_by: int | None = None

    @property
    def accessor(self) -> Accessor:
        """Return the accessor this setup applies to."""
        return self.pattern.accessor

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<Setup #{self.sequence} {self.accessor}: {self.pattern.describe()}>"

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------
    def returns(self, value: object) -> Setup:
        """Return *value* from every matching call."""
        self._require_value_producing()
        self.behavior.add(ReturnValue(value))
        return self

    def returns_from(self, factory: t.Callable[..., object]) -> Setup:
        """Return ``factory(*args)``, evaluated on every matching call."""
        self._require_value_producing()
        if not callable(factory):
            msg = f"returns_from() needs a callable, got {factory!r}"
            raise ConfigurationError(msg)
        self.behavior.add(ReturnValue(factory=factory))
        return self

    def throws(
        self,
        kind: type[BaseException] | BaseException,
        message: str | t.Callable[..., str] | None = None,
    ) -> Setup:
        """Raise *kind* on every matching call.

        *kind* is an exception instance, or a class instantiated per call with
        *message* (a string or a callable receiving the call's arguments).
        """
        if isinstance(kind, BaseException):
            if message is not None:
                msg = "message cannot be combined with an exception instance"
                raise ConfigurationError(msg)
        elif not (isinstance(kind, type) and issubclass(kind, BaseException)):
            msg = f"throws() needs an exception class or instance, got {kind!r}"
            raise ConfigurationError(msg)
        self.behavior.add(ThrowFailure(kind, message))
        return self

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------
    def callback(
        self,
        func: t.Callable[..., object],
        *,
        position: CallbackPosition | str | None = None,
    ) -> Setup:
        """Run *func* with the call's arguments.

        Without an explicit *position* a callback declared before any
        ``returns``/``throws`` runs before the outcome, and after it otherwise.
        """
        if position is None:
            resolved = (
                CallbackPosition.BEFORE
                if self.behavior.outcome is None
                else CallbackPosition.AFTER
            )
        else:
            resolved = CallbackPosition(position)
        self.behavior.add(Callback(func, resolved))
        return self

    def assigns_out(self, param: str | int, value: object) -> Setup:
        """Write *value* into the ``out``/``ref`` slot passed for *param*."""
        method = self._require_method("assigns_out")
        index = method.param_index(param)
        if method.params[index].kind is ParamKind.IN:
            msg = (
                f"{method.name}({method.params[index].name}) is not an "
                "out or ref parameter"
            )
            raise ConfigurationError(msg)
        self.behavior.add(AssignOut(index, value))
        return self

    def raises_event(self, event: str, *args: object) -> Setup:
        """Fire *event* with *args* after each matching call."""
        declared = self.contract.event(event)
        check_event_arity(declared, args)
        self.behavior.add(RaiseEvent(event, args))
        return self

    def verifiable(self, message: str | None = None) -> Setup:
        """Include this setup in ``verify_setups()``."""
        self.is_verifiable = True
        self.verify_message = message
        return self

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_method(self, action: str) -> Method:
        if not isinstance(self.member, Method):
            msg = f"{action}() only applies to method setups"
            raise ConfigurationError(msg)
        return self.member

    def _require_value_producing(self) -> None:
        if self.accessor is Accessor.SET:
            msg = f"setter setups for {self.member.name!r} cannot return values"
            raise ConfigurationError(msg)


def check_event_arity(event: Event, args: t.Sequence[object]) -> None:
    """Raise ``ConfigurationError`` if *args* do not fit *event*'s handlers."""
    if event.params is not None and len(args) != len(event.params):
        msg = (
            f"event {event.name!r} takes {len(event.params)} arguments "
            f"{event.params}, got {len(args)}"
        )
        raise ConfigurationError(msg)


class SetupRegistry:
    """Setups of one mock keyed by member name."""

    def __init__(self, contract: Contract, sequence: t.Callable[[], int]) -> None:
        self._contract = contract
        self._sequence = sequence
        self._setups: dict[str, list[Setup]] = defaultdict(list)

    def register(
        self,
        member: Member,
        pattern: CallPattern,
        outs: t.Sequence[OutAssignment] = (),
    ) -> Setup:
        """Create, store and return a setup for *member*."""
        _check_arity(member, pattern)
        setup = Setup(self._contract, member, pattern, self._sequence())
        for index, value in outs:
            setup.assigns_out(index, value)
        for earlier in self._setups[member.name]:
            if earlier.overridden_by is None and earlier.pattern == pattern:
                earlier.overridden_by = setup.sequence
        self._setups[member.name].append(setup)
        logger.debug("Registered %r", setup)
        return setup

    def resolve(
        self, member: str, accessor: Accessor, args: t.Sequence[object]
    ) -> Setup | None:
        """Return the most recently registered setup matching the call."""
        for setup in reversed(self._setups.get(member, ())):
            if setup.accessor is accessor and setup.pattern.matches(args):
                return setup
        return None

    def has_setup(self, member: str, accessor: Accessor) -> bool:
        """Return ``True`` if any setup exists for *member* and *accessor*."""
        return any(s.accessor is accessor for s in self._setups.get(member, ()))

    def setups_for(
        self, member: str, accessor: Accessor | None = None
    ) -> tuple[Setup, ...]:
        """Return setups of *member* in registration order."""
        return tuple(
            s
            for s in self._setups.get(member, ())
            if accessor is None or s.accessor is accessor
        )

    def __iter__(self) -> t.Iterator[Setup]:
        """Iterate over all setups in registration order."""
        every = [s for setups in self._setups.values() for s in setups]
        return iter(sorted(every, key=lambda s: s.sequence))

    def __len__(self) -> int:
        """Return the number of registered setups."""
        return sum(len(setups) for setups in self._setups.values())


def _check_arity(member: Member, pattern: CallPattern) -> None:
    if isinstance(member, Method):
        expected = len(member.params)
    elif isinstance(member, Property):
        expected = 1 if pattern.accessor is Accessor.SET else 0
    else:
        msg = f"events cannot be set up; use raise_event({member.name!r})"
        raise ConfigurationError(msg)
    if len(pattern.matchers) != expected:
        msg = (
            f"pattern for {member.name!r} has {len(pattern.matchers)} matchers, "
            f"expected {expected}"
        )
        raise ConfigurationError(msg)


__all__ = ["Setup", "SetupRegistry", "check_event_arity"]
