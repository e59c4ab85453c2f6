"""Unit tests for zero values of unconfigured members."""

from __future__ import annotations

import typing as t

import pytest

from contract_mox.defaults import DefaultValue, zero_value
from tests.helpers.contracts import IBaz


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (bool, False),
        (int, 0),
        (float, 0.0),
        (str, ""),
        (bytes, b""),
        (list[int], []),
        (dict[str, int], {}),
        (tuple[int, ...], ()),
        (t.Annotated[int, "meta"], 0),
        (int | None, None),
        (t.Optional[str], None),  # noqa: UP045
        (t.Union[int, str], 0),  # noqa: UP007
        (None, None),
        (type(None), None),
        (IBaz, None),
        ("str", None),
    ],
)
def test_zero_value(annotation: object, expected: object) -> None:
    """Builtins yield their empty value; optional and unknown types ``None``."""
    assert zero_value(annotation) == expected
    assert type(zero_value(annotation)) is type(expected)


def test_zero_value_containers_are_fresh() -> None:
    """Each call builds a new container."""
    first = zero_value(list)
    second = zero_value(list)
    assert first == second
    assert first is not second


def test_default_value_accepts_strings() -> None:
    """Policies are string enums so configuration files can name them."""
    assert DefaultValue("mock") is DefaultValue.MOCK
    assert str(DefaultValue.ZERO) == "zero"
