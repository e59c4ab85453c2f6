"""Default values returned for members without a governing setup."""

from __future__ import annotations

import enum
import types
import typing as t

_ZERO_FACTORIES: t.Final[dict[type, t.Callable[[], object]]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    bytearray: bytearray,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}


class DefaultValue(enum.StrEnum):
    """Policy for values produced by loose mocks."""

    ZERO = "zero"
    MOCK = "mock"


def zero_value(tp: object) -> object:
    """Return the zero/empty value for the annotation *tp*.

    Builtin scalars and containers yield their empty instance (a fresh one on
    every call); optional and unknown types yield ``None``.
    """
    if tp is None or tp is type(None):
        return None
    origin = t.get_origin(tp)
    if origin is t.Annotated:
        return zero_value(t.get_args(tp)[0])
    if origin is t.Union or origin is types.UnionType:
        args = t.get_args(tp)
        if type(None) in args:
            return None
        return zero_value(args[0])
    if origin is not None:
        tp = origin
    if not isinstance(tp, type):
        return None
    factory = _ZERO_FACTORIES.get(tp)
    return None if factory is None else factory()


__all__ = ["DefaultValue", "zero_value"]
