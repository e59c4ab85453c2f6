"""The :class:`Mock` controller and its dispatch policies."""

from __future__ import annotations

import enum
import functools
import itertools
import logging
import typing as t

from .comparators import Any
from .contract import (
    Accessor,
    Contract,
    Property,
    is_contract_type,
)
from .defaults import DefaultValue, zero_value
from .errors import (
    ConfigurationError,
    ConfigurationMissingError,
    ContractMoxError,
    VerificationError,
)
from .events import EventAccessor, EventHub, Handler
from .expectations import CallPattern, Times
from .journal import Invocation, InvocationLog
from .properties import PropertyStore
from .proxy import mock_behind, synthesize
from .registry import Setup, SetupRegistry, check_event_arity
from .reporting import RaisingReporter, Reporter
from .verifiers import (
    CountVerifier,
    ExpectedCall,
    NoOtherCallsVerifier,
    SetupVerifier,
)

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_UNSET: t.Final = object()


class MockBehavior(enum.StrEnum):
    """Dispatch policy for invocations no setup governs."""

    STRICT = "strict"
    LOOSE = "loose"


class Mock(t.Generic[T]):
    """Runtime implementation of a contract with configurable behaviour.

    ``mock.object`` is the synthesized object handed to the code under test.
    Every access through it is recorded, routed to the most recently
    registered matching setup, and otherwise answered according to
    ``behavior`` (fail in ``STRICT`` mode, default value in ``LOOSE`` mode).

    Parameters
    ----------
    contract:
        A ``Protocol``/abstract class or an explicit :class:`Contract`.
    behavior:
        ``MockBehavior.LOOSE`` (the default) or ``MockBehavior.STRICT``.
    default_value:
        ``DefaultValue.ZERO`` returns zero/empty values for unconfigured
        members; ``DefaultValue.MOCK`` returns memoized child mocks for
        members whose type is itself a contract.
    reporter:
        Sink for failures and advisories. Defaults to
        :class:`~contract_mox.reporting.RaisingReporter`.
    name:
        Name used in diagnostics; defaults to the contract name.
    """

    def __init__(
        self,
        contract: type[T] | Contract,
        *,
        behavior: MockBehavior | str = MockBehavior.LOOSE,
        default_value: DefaultValue | str = DefaultValue.ZERO,
        reporter: Reporter | None = None,
        name: str | None = None,
    ) -> None:
        self.contract = Contract.of(contract)
        self.name = name or self.contract.name
        self.behavior = MockBehavior(behavior)
        self.default_value = DefaultValue(default_value)
        self.reporter: Reporter = (
            reporter if reporter is not None else RaisingReporter()
        )

        sequence = functools.partial(next, itertools.count(1))
        self._registry = SetupRegistry(self.contract, sequence)
        self._journal = InvocationLog(sequence)
        self._properties = PropertyStore(
            self.contract,
            default_for=self._property_default,
            child_factory=self._create_child,
        )
        self._events = EventHub(self.contract)
        self._accessors: dict[str, EventAccessor] = {}
        self._object = synthesize(self)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"<Mock {self.name} behavior={self.behavior} "
            f"invocations={len(self._journal)}>"
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def object(self) -> T:
        """Return the synthesized contract object."""
        return t.cast("T", self._object)

    @property
    def journal(self) -> InvocationLog:
        """Return the invocation log."""
        return self._journal

    @property
    def invocations(self) -> tuple[Invocation, ...]:
        """Return every recorded invocation in call order."""
        return tuple(self._journal)

    @property
    def setups(self) -> tuple[Setup, ...]:
        """Return every setup, including overridden ones, in registration order."""
        return tuple(self._registry)

    @property
    def properties(self) -> PropertyStore:
        """Return the property store."""
        return self._properties

    @property
    def events(self) -> EventHub:
        """Return the event hub."""
        return self._events

    @staticmethod
    def get(obj: object) -> Mock[t.Any]:
        """Return the mock behind a synthesized object."""
        mock = mock_behind(obj)
        if mock is None:
            msg = f"{obj!r} is not a mock object"
            raise TypeError(msg)
        return mock

    def child(self, path: str) -> Mock[t.Any]:
        """Return the child mock reached through the property *path*."""
        target = self
        for segment in path.split("."):
            target = target._child_for_property(segment)
        return target

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def setup(self, member: str, *args: object, **kwargs: object) -> Setup:
        """Configure calls of the method *member* matching the arguments.

        Arguments are comparators or literal values; ``member`` may be a
        dotted path through contract-typed properties (``"baz.get_name"``).
        """
        target, name = self._walk(member)
        method = target.contract.method(name)
        pattern, outs = CallPattern.for_method(method, args, kwargs)
        return target._registry.register(method, pattern, outs)

    def setup_get(self, path: str) -> Setup:
        """Configure reads of the property at *path*."""
        target, name = self._walk(path)
        prop = target._require_property(name, Accessor.GET)
        target._properties.mark_explicit(name)
        return target._registry.register(prop, CallPattern.for_getter(prop))

    def setup_set(self, path: str, value: object = _UNSET) -> Setup:
        """Configure writes of *value* (any value by default) at *path*."""
        target, name = self._walk(path)
        prop = target._require_property(name, Accessor.SET)
        matcher = Any() if value is _UNSET else value
        return target._registry.register(prop, CallPattern.for_setter(prop, matcher))

    def setup_property(self, path: str, initial: object = _UNSET) -> Mock[T]:
        """Track the value of the property at *path*, optionally preset."""
        target, name = self._walk(path)
        target._properties.track(name, initial)
        return self

    def setup_all_properties(self) -> Mock[T]:
        """Track the values of every property of the contract."""
        self._properties.track_all()
        return self

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def event_accessor(self, name: str) -> EventAccessor:
        """Return the accessor exposed on the object for the event *name*."""
        accessor = self._accessors.get(name)
        if accessor is None:
            self.contract.event(name)
            accessor = EventAccessor(
                name,
                functools.partial(self._subscribe, name),
                functools.partial(self._unsubscribe, name),
            )
            self._accessors[name] = accessor
        return accessor

    def raise_event(self, name: str, *args: object) -> None:
        """Invoke every handler subscribed to the event *name* with *args*."""
        check_event_arity(self.contract.event(name), args)
        self._events.raise_event(name, args)

    def _subscribe(self, name: str, handler: Handler) -> None:
        self._journal.record(name, Accessor.ADD, (handler,))
        self._events.subscribe(name, handler)

    def _unsubscribe(self, name: str, handler: Handler) -> None:
        self._journal.record(name, Accessor.REMOVE, (handler,))
        self._events.unsubscribe(name, handler)

    def _raise_from_setup(self, name: str, args: tuple[object, ...]) -> None:
        self._events.raise_event(name, args)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch_call(
        self, name: str, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> object:
        """Handle a method call made through the synthesized object."""
        method = self.contract.method(name)
        values = method.bind(args, kwargs)
        self._journal.record(name, Accessor.CALL, values)

        def default() -> object:
            return self._default_for(name, method.returns)

        setup = self._registry.resolve(name, Accessor.CALL, values)
        if setup is None:
            return self._fallback(name, Accessor.CALL, values, default)
        return self._execute(setup, values, default)

    def dispatch_get(self, name: str) -> object:
        """Handle a property read made through the synthesized object."""
        prop = self.contract.prop(name)
        self._journal.record(name, Accessor.GET)

        def default() -> object:
            return self._default_for(name, prop.type)

        setup = self._registry.resolve(name, Accessor.GET, ())
        if setup is not None:
            return self._execute(setup, (), default)
        if self._properties.is_tracked(name):
            return self._properties.read(name)
        child = self._properties.existing_child(name)
        if child is not None:
            return child.object
        return self._fallback(name, Accessor.GET, (), default)

    def dispatch_set(self, name: str, value: object) -> None:
        """Handle a property write made through the synthesized object."""
        self.contract.prop(name)
        args = (value,)
        self._journal.record(name, Accessor.SET, args)

        tracked = self._properties.is_tracked(name)
        setup = self._registry.resolve(name, Accessor.SET, args)
        if setup is not None:
            self._execute(setup, args, lambda: None)
        elif not tracked:
            self._fallback(name, Accessor.SET, args, lambda: None)
        if tracked:
            self._properties.write(name, value)

    def _execute(
        self,
        setup: Setup,
        args: t.Sequence[object],
        default: t.Callable[[], object],
    ) -> object:
        setup.hits += 1
        return setup.behavior.execute(
            args, raise_event=self._raise_from_setup, default=default
        )

    def _fallback(
        self,
        name: str,
        accessor: Accessor,
        args: t.Sequence[object],
        default: t.Callable[[], object],
    ) -> object:
        if self.behavior is MockBehavior.STRICT:
            rendered = Invocation(name, accessor, tuple(args), 0, 0).describe()
            msg = (
                f"{self.name} is strict and has no setup for {accessor} "
                f"{rendered}"
            )
            self.reporter.fail(
                ConfigurationMissingError(msg, member=name, accessor=accessor)
            )
        logger.debug("No setup for %s %s.%s; using default", accessor, self.name, name)
        return default()

    # ------------------------------------------------------------------
    # Defaults and children
    # ------------------------------------------------------------------
    def _default_for(self, name: str, tp: object) -> object:
        if self.default_value is DefaultValue.MOCK and is_contract_type(tp):
            return self._properties.child(name, tp).object
        return zero_value(tp)

    def _property_default(self, prop: Property) -> object:
        return self._default_for(prop.name, prop.type)

    def _create_child(self, name: str, contract_type: object) -> Mock[t.Any]:
        return Mock(
            t.cast("type | Contract", contract_type),
            behavior=self.behavior,
            default_value=self.default_value,
            reporter=self.reporter,
            name=f"{self.name}.{name}",
        )

    def _child_for_property(self, name: str) -> Mock[t.Any]:
        prop = self.contract.prop(name)
        if not is_contract_type(prop.type):
            msg = f"{self.name}.{name} is not of a contract type"
            raise ConfigurationError(msg)
        return self._properties.child(name, prop.type)

    def _walk(self, path: str) -> tuple[Mock[t.Any], str]:
        *parents, name = path.split(".")
        target: Mock[t.Any] = self
        for segment in parents:
            target = target._child_for_property(segment)
        return target, name

    def _require_property(self, name: str, accessor: Accessor) -> Property:
        prop = self.contract.prop(name)
        if accessor is Accessor.GET and not prop.readable:
            msg = f"{self.name}.{name} has no getter"
            raise ConfigurationError(msg)
        if accessor is Accessor.SET and not prop.writable:
            msg = f"{self.name}.{name} has no setter"
            raise ConfigurationError(msg)
        return prop

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def call(self, member: str, *args: object, **kwargs: object) -> ExpectedCall:
        """Describe an expected call of *member* for ordering checks."""
        target, name = self._walk(member)
        pattern, _ = CallPattern.for_method(target.contract.method(name), args, kwargs)
        return ExpectedCall(target, pattern)

    def verify(
        self,
        member: str,
        *args: object,
        times: Times | None = None,
        message: str | None = None,
        advisory: bool = False,
        **kwargs: object,
    ) -> None:
        """Check how often *member* was called with matching arguments.

        *times* defaults to ``Times.at_least_once()``. With ``advisory`` set a
        failure is reported as a warning instead of failing the test.
        """
        target, name = self._walk(member)
        pattern, _ = CallPattern.for_method(target.contract.method(name), args, kwargs)
        target._verify_pattern(
            pattern, times, message, advisory=advisory, stacklevel=3
        )

    def verify_get(
        self,
        path: str,
        *,
        times: Times | None = None,
        message: str | None = None,
        advisory: bool = False,
    ) -> None:
        """Check how often the property at *path* was read."""
        target, name = self._walk(path)
        prop = target._require_property(name, Accessor.GET)
        target._verify_pattern(
            CallPattern.for_getter(prop),
            times,
            message,
            advisory=advisory,
            stacklevel=3,
        )

    def verify_set(
        self,
        path: str,
        value: object = _UNSET,
        *,
        times: Times | None = None,
        message: str | None = None,
        advisory: bool = False,
    ) -> None:
        """Check how often *value* (any value by default) was written at *path*."""
        target, name = self._walk(path)
        prop = target._require_property(name, Accessor.SET)
        matcher = Any() if value is _UNSET else value
        target._verify_pattern(
            CallPattern.for_setter(prop, matcher),
            times,
            message,
            advisory=advisory,
            stacklevel=3,
        )

    def verify_setups(self, *, advisory: bool = False) -> None:
        """Check that every setup marked ``verifiable()`` was matched."""
        self._report_check(self.check_setups, advisory=advisory, stacklevel=3)

    def verify_all(self, *, advisory: bool = False) -> None:
        """Check that every setup not overridden by a later one was matched."""
        self._report_check(
            functools.partial(self.check_setups, include_all=True),
            advisory=advisory,
            stacklevel=3,
        )

    def verify_no_other_calls(self, *, advisory: bool = False) -> None:
        """Check that earlier verifications covered every invocation."""
        self._report_check(
            self.check_no_other_calls, advisory=advisory, stacklevel=3
        )

    def check_setups(self, *, include_all: bool = False) -> None:
        """Raise ``VerificationError`` for unmatched setups, bypassing the reporter."""
        SetupVerifier(include_all=include_all).verify(
            self._registry, mock_name=self.name
        )

    def check_no_other_calls(self) -> None:
        """Raise ``VerificationError`` for unverified calls, bypassing the reporter."""
        NoOtherCallsVerifier().verify(self._journal, mock_name=self.name)

    def _verify_pattern(
        self,
        pattern: CallPattern,
        times: Times | None,
        message: str | None,
        *,
        advisory: bool,
        stacklevel: int,
    ) -> None:
        expected = Times.at_least_once() if times is None else times
        self._report_check(
            functools.partial(
                CountVerifier().verify,
                self._journal,
                pattern,
                expected,
                mock_name=self.name,
                message=message,
            ),
            advisory=advisory,
            stacklevel=stacklevel + 1,
        )

    def _report_check(
        self, check: t.Callable[[], None], *, advisory: bool, stacklevel: int
    ) -> None:
        # stacklevel counts frames as warnings.warn does, 1 being this method.
        try:
            check()
        except VerificationError as err:
            self._report(err, advisory=advisory, stacklevel=stacklevel + 1)

    def _report(
        self, error: ContractMoxError, *, advisory: bool, stacklevel: int
    ) -> None:
        if advisory:
            self.reporter.warn(error, stacklevel=stacklevel + 1)
        else:
            self.reporter.fail(error)


def mock_of(contract: type[T] | Contract, **values: object) -> T:
    """Return a loose mock object whose named properties hold *values*.

    Without values this is a null object: every member answers with its
    default.
    """
    mock: Mock[T] = Mock(contract)
    for name, value in values.items():
        mock.setup_property(name, value)
    return mock.object


__all__ = ["Mock", "MockBehavior", "mock_of"]
