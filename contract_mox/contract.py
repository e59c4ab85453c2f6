"""Contract descriptions: the members a mock object must satisfy."""

from __future__ import annotations

import abc
import dataclasses as dc
import enum
import inspect
import logging
import typing as t

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_UNSET: t.Final = object()

# Classes contributing nothing but typing machinery to a contract's MRO.
_SKIPPED_BASES: t.Final[frozenset[type]] = frozenset(
    {object, t.Protocol, t.Generic, abc.ABC}  # type: ignore[arg-type]
)

# Bookkeeping attributes typing and abc put on every protocol class.
_PROTOCOL_INTERNALS: t.Final[frozenset[str]] = frozenset(
    {"_is_protocol", "_is_runtime_protocol", "_abc_impl"}
)


class Slot(t.Generic[T]):
    """Mutable box standing in for an output or by-reference argument."""

    __slots__ = ("_value",)

    def __init__(self, value: T | object = _UNSET) -> None:
        self._value = value

    @property
    def value(self) -> T | None:
        """Return the boxed value, or ``None`` when nothing was assigned."""
        return None if self._value is _UNSET else t.cast("T", self._value)

    @value.setter
    def value(self, value: T) -> None:
        self._value = value

    @property
    def is_set(self) -> bool:
        """Return ``True`` once a value has been assigned."""
        return self._value is not _UNSET

    def __repr__(self) -> str:
        """Return a debug representation."""
        inner = "" if self._value is _UNSET else repr(self._value)
        return f"{type(self).__name__}({inner})"


class Out(Slot[T]):
    """Output parameter slot; the mock writes configured values into it."""

    __slots__ = ()


class Ref(Slot[T]):
    """By-reference parameter slot; matched by identity of its value."""

    __slots__ = ()


class ParamKind(enum.StrEnum):
    """Direction of a method parameter."""

    IN = "in"
    OUT = "out"
    REF = "ref"


class Accessor(enum.StrEnum):
    """The way a member is reached through the synthesized object."""

    CALL = "call"
    GET = "get"
    SET = "set"
    ADD = "add"
    REMOVE = "remove"


@dc.dataclass(frozen=True, slots=True)
class Param:
    """A single method parameter."""

    name: str
    kind: ParamKind = ParamKind.IN
    annotation: t.Any = None
    default: t.Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        """Return ``True`` when the parameter declares a default value."""
        return self.default is not inspect.Parameter.empty


@dc.dataclass(frozen=True, slots=True)
class Method:
    """A callable contract member with a fixed signature."""

    name: str
    params: tuple[Param, ...] = ()
    returns: t.Any = None
    signature: inspect.Signature = dc.field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        parameters = [
            inspect.Parameter(
                param.name,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
                default=param.default,
                annotation=(
                    inspect.Parameter.empty
                    if param.annotation is None
                    else param.annotation
                ),
            )
            for param in self.params
        ]
        try:
            signature = inspect.Signature(parameters)
        except ValueError as exc:
            msg = f"invalid signature for {self.name!r}: {exc}"
            raise ConfigurationError(msg) from exc
        object.__setattr__(self, "signature", signature)

    def bind(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> tuple[object, ...]:
        """Bind a concrete call to positional values in declaration order.

        Raises ``TypeError`` for calls a real implementation would reject.
        """
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple(bound.arguments[param.name] for param in self.params)

    def param_index(self, name_or_index: str | int) -> int:
        """Return the position of a parameter given its name or index."""
        if isinstance(name_or_index, int):
            if not 0 <= name_or_index < len(self.params):
                msg = f"{self.name!r} has no parameter at index {name_or_index}"
                raise ConfigurationError(msg)
            return name_or_index
        for index, param in enumerate(self.params):
            if param.name == name_or_index:
                return index
        msg = f"{self.name!r} has no parameter named {name_or_index!r}"
        raise ConfigurationError(msg)


@dc.dataclass(frozen=True, slots=True)
class Property:
    """A get/set contract member."""

    name: str
    type: t.Any = None
    readable: bool = True
    writable: bool = True


@dc.dataclass(frozen=True, slots=True)
class Event:
    """An event members can subscribe handlers to.

    Declare events on a contract class as attributes; the name is taken from
    the attribute::

        class Animal(t.Protocol):
            falls_ill = Event(params=("sender", "args"))
    """

    name: str = ""
    params: tuple[str, ...] | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        if not self.name:
            object.__setattr__(self, "name", name)


Member: t.TypeAlias = Method | Property | Event


@dc.dataclass(frozen=True)
class Contract:
    """A named, immutable set of members."""

    name: str
    members: tuple[Member, ...] = ()
    spec: type | None = dc.field(default=None, compare=False)
    _by_name: dict[str, Member] = dc.field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        by_name: dict[str, Member] = {}
        for member in self.members:
            if not member.name:
                msg = f"contract {self.name!r} declares a member without a name"
                raise ConfigurationError(msg)
            if member.name in by_name:
                msg = f"contract {self.name!r} declares {member.name!r} twice"
                raise ConfigurationError(msg)
            by_name[member.name] = member
        object.__setattr__(self, "_by_name", by_name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def __contains__(self, name: object) -> bool:
        """Return ``True`` when the contract declares *name*."""
        return name in self._by_name

    def member(self, name: str) -> Member:
        """Return the member called *name* or raise ``ConfigurationError``."""
        try:
            return self._by_name[name]
        except KeyError:
            msg = f"{self.name!r} has no member named {name!r}"
            raise ConfigurationError(msg) from None

    def method(self, name: str) -> Method:
        """Return the method called *name*."""
        return self._member_of_kind(name, Method, "method")

    def prop(self, name: str) -> Property:
        """Return the property called *name*."""
        return self._member_of_kind(name, Property, "property")

    def event(self, name: str) -> Event:
        """Return the event called *name*."""
        return self._member_of_kind(name, Event, "event")

    def _member_of_kind(self, name: str, kind: type[t.Any], label: str) -> t.Any:
        member = self.member(name)
        if not isinstance(member, kind):
            msg = f"{self.name}.{name} is not a {label}"
            raise ConfigurationError(msg)
        return member

    @property
    def methods(self) -> tuple[Method, ...]:
        """Return all declared methods."""
        return tuple(m for m in self.members if isinstance(m, Method))

    @property
    def properties(self) -> tuple[Property, ...]:
        """Return all declared properties."""
        return tuple(m for m in self.members if isinstance(m, Property))

    @property
    def events(self) -> tuple[Event, ...]:
        """Return all declared events."""
        return tuple(m for m in self.members if isinstance(m, Event))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def of(cls, source: Contract | type) -> Contract:
        """Return *source* as a contract, deriving one from a class."""
        if isinstance(source, Contract):
            return source
        if isinstance(source, type):
            return cls.from_class(source)
        msg = f"cannot build a contract from {source!r}"
        raise TypeError(msg)

    @classmethod
    def from_class(cls, spec: type) -> Contract:
        """Derive a contract from a ``Protocol`` or abstract base class.

        Public and protected (single underscore) functions become methods,
        ``property`` objects and annotated attributes become properties, and
        ``Event`` attributes become events. Dunder and name-mangled members
        are not part of the contract.
        ``Out[T]`` and ``Ref[T]`` annotations mark parameter directions.
        """
        cached = _CONTRACT_CACHE.get(spec)
        if cached is not None:
            return cached

        collected: dict[str, Member] = {}
        for klass in reversed(spec.__mro__):
            if klass in _SKIPPED_BASES:
                continue
            collected.update(_members_declared_on(klass))

        contract = cls(spec.__name__, tuple(collected.values()), spec=spec)
        _CONTRACT_CACHE[spec] = contract
        logger.debug(
            "Derived contract %s with members %s", spec.__name__, sorted(collected)
        )
        return contract


_CONTRACT_CACHE: dict[type, Contract] = {}


def is_contract_type(tp: object) -> bool:
    """Return ``True`` when *tp* describes a contract a child mock can satisfy."""
    if isinstance(tp, Contract):
        return True
    if not isinstance(tp, type) or tp in _SKIPPED_BASES:
        return False
    return bool(getattr(tp, "_is_protocol", False)) or inspect.isabstract(tp)


def _type_hints(obj: object) -> dict[str, t.Any]:
    """Return resolved annotations, or an empty mapping if they do not resolve."""
    try:
        return t.get_type_hints(obj)
    except (NameError, TypeError):
        logger.debug("Could not resolve annotations of %r", obj)
        return {}


def _own_annotation_names(klass: type) -> list[str]:
    try:
        return list(inspect.get_annotations(klass))
    except NameError:  # pragma: no cover - eagerly evaluated forward refs
        return []


def _is_member_name(klass: type, name: str) -> bool:
    """Return ``True`` for public and protected (single underscore) names."""
    if name.startswith("__") or name.startswith(f"_{klass.__name__}__"):
        return False
    return name not in _PROTOCOL_INTERNALS


def _members_declared_on(klass: type) -> dict[str, Member]:
    members: dict[str, Member] = {}
    class_hints = _type_hints(klass)
    for name in _own_annotation_names(klass):
        if not _is_member_name(klass, name):
            continue
        hint = class_hints.get(name)
        if t.get_origin(hint) is t.ClassVar:
            continue
        members[name] = Property(name, type=hint)

    for name, value in vars(klass).items():
        if not _is_member_name(klass, name):
            continue
        if isinstance(value, Event):
            members[name] = value if value.name == name else Event(name, value.params)
        elif isinstance(value, property):
            members[name] = _property_from(name, value)
        elif inspect.isfunction(value):
            members[name] = _method_from(name, value)
    return members


def _property_from(name: str, prop: property) -> Property:
    hint = _type_hints(prop.fget).get("return") if prop.fget is not None else None
    return Property(
        name,
        type=hint,
        readable=prop.fget is not None,
        writable=prop.fset is not None,
    )


def _param_kind(hint: object) -> ParamKind:
    origin = t.get_origin(hint) or hint
    if isinstance(origin, type) and issubclass(origin, Ref):
        return ParamKind.REF
    if isinstance(origin, type) and issubclass(origin, Out):
        return ParamKind.OUT
    return ParamKind.IN


def _method_from(name: str, func: t.Callable[..., t.Any]) -> Method:
    signature = inspect.signature(func)
    hints = _type_hints(func)
    params: list[Param] = []
    for index, parameter in enumerate(signature.parameters.values()):
        if index == 0 and parameter.name in {"self", "cls"}:
            continue
        if parameter.kind in {
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        }:
            msg = f"{name!r} uses variadic parameters; contracts need fixed signatures"
            raise ConfigurationError(msg)
        hint = hints.get(parameter.name)
        params.append(
            Param(
                parameter.name,
                kind=_param_kind(hint),
                annotation=hint,
                default=parameter.default,
            )
        )
    return Method(name, tuple(params), returns=hints.get("return"))


__all__ = [
    "Accessor",
    "Contract",
    "Event",
    "Member",
    "Method",
    "Out",
    "Param",
    "ParamKind",
    "Property",
    "Ref",
    "Slot",
    "is_contract_type",
]
