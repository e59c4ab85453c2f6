"""Synthesis of contract-shaped objects that route member access to a mock."""

from __future__ import annotations

import inspect
import types
import typing as t

from .contract import Contract, Event, Method, Property
from .events import EventAccessor

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import Mock

MOCK_ATTRIBUTE: t.Final[str] = "__contract_mox_mock__"


def mock_behind(obj: object) -> Mock[t.Any] | None:
    """Return the mock that synthesized *obj*, or ``None``."""
    try:
        return object.__getattribute__(obj, MOCK_ATTRIBUTE)
    except AttributeError:
        return None


def _owner(obj: object) -> Mock[t.Any]:
    return object.__getattribute__(obj, MOCK_ATTRIBUTE)


def synthesize(mock: Mock[t.Any]) -> object:
    """Build the dispatch class for *mock*'s contract and return an instance."""
    cls = build_proxy_class(mock.contract)
    obj = object.__new__(cls)
    object.__setattr__(obj, MOCK_ATTRIBUTE, mock)
    return obj


def build_proxy_class(contract: Contract) -> type:
    """Return a class with one dispatching entry per contract member.

    Contracts derived from a class produce a subclass of it, so the object
    passes ``isinstance`` checks against the contract type.
    """
    namespace: dict[str, object] = {"__repr__": _repr}
    for member in contract.members:
        if isinstance(member, Method):
            namespace[member.name] = _method_entry(member)
        elif isinstance(member, Property):
            namespace[member.name] = _property_entry(member)
        elif isinstance(member, Event):
            namespace[member.name] = _event_entry(member)

    bases: tuple[type, ...] = () if contract.spec is None else (contract.spec,)
    cls = types.new_class(
        f"{contract.name}Mock",
        bases,
        exec_body=lambda ns: ns.update(namespace),
    )
    if contract.spec is not None:
        # Every contract member is overridden above; name-mangled abstract
        # hooks of the contract class must not block instantiation.
        cls.__abstractmethods__ = frozenset()
    return cls


def _repr(self: object) -> str:
    return f"<{_owner(self).name} mock object>"


def _method_entry(method: Method) -> t.Callable[..., object]:
    name = method.name

    def invoke(self: object, *args: object, **kwargs: object) -> object:
        return _owner(self).dispatch_call(name, args, kwargs)

    self_param = inspect.Parameter("self", inspect.Parameter.POSITIONAL_ONLY)
    invoke.__name__ = name
    invoke.__qualname__ = name
    invoke.__signature__ = method.signature.replace(  # type: ignore[attr-defined]
        parameters=[self_param, *method.signature.parameters.values()]
    )
    return invoke


def _property_entry(prop: Property) -> property:
    name = prop.name

    def fget(self: object) -> object:
        return _owner(self).dispatch_get(name)

    def fset(self: object, value: object) -> None:
        _owner(self).dispatch_set(name, value)

    return property(
        fget if prop.readable else None,
        fset if prop.writable else None,
        doc=f"Mocked property {name!r}.",
    )


def _event_entry(event: Event) -> property:
    name = event.name

    def fget(self: object) -> EventAccessor:
        return _owner(self).event_accessor(name)

    def fset(self: object, value: object) -> None:
        # ``obj.event += handler`` rebinds the accessor returned by __iadd__.
        if isinstance(value, EventAccessor) and value.name == name:
            return
        msg = f"cannot assign to event {name!r}; use += or subscribe()"
        raise AttributeError(msg)

    return property(fget, fset, doc=f"Mocked event {name!r}.")


__all__ = ["MOCK_ATTRIBUTE", "build_proxy_class", "mock_behind", "synthesize"]
