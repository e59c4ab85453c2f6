"""Unit tests for contract derivation and lookup."""

from __future__ import annotations

import abc
import typing as t

import pytest

from contract_mox.contract import (
    Contract,
    Event,
    Method,
    Out,
    Param,
    ParamKind,
    Property,
    Ref,
    is_contract_type,
)
from contract_mox.errors import ConfigurationError
from tests.helpers.contracts import Bar, IAnimal, IBaz, IFoo, INode, Person


class _Variadic(t.Protocol):
    def log(self, *messages: str) -> None: ...


class _Plain:
    pass


def test_protocol_members_are_derived() -> None:
    """Functions, annotations and properties become contract members."""
    contract = Contract.of(IFoo)

    assert contract.name == "IFoo"
    assert contract.spec is IFoo
    assert {m.name for m in contract.methods} == {
        "do_something",
        "process_string",
        "try_parse",
        "submit",
        "get_count",
        "add",
    }
    assert {p.name for p in contract.properties} == {
        "name",
        "some_other_property",
        "some_baz",
    }
    assert contract.events == ()


def test_parameter_kinds_follow_slot_annotations() -> None:
    """``Out``/``Ref`` annotations mark output and by-reference parameters."""
    contract = Contract.of(IFoo)

    try_parse = contract.method("try_parse")
    submit = contract.method("submit")

    assert [p.kind for p in try_parse.params] == [ParamKind.IN, ParamKind.OUT]
    assert submit.params[0].kind is ParamKind.REF
    assert t.get_args(submit.params[0].annotation) == (Bar,)
    assert contract.method("do_something").returns is bool


def test_read_only_property_has_no_setter() -> None:
    """``property`` objects without ``fset`` are read-only."""
    some_baz = Contract.of(IFoo).prop("some_baz")
    assert some_baz.readable
    assert not some_baz.writable
    assert some_baz.type is IBaz


def test_events_are_named_after_attributes() -> None:
    """``Event`` attributes take their attribute name."""
    contract = Contract.of(IAnimal)
    assert [e.name for e in contract.events] == ["falls_ill", "abducted_by_aliens"]
    assert contract.event("falls_ill").params == ("sender", "args")
    assert [m.name for m in contract.methods] == ["stumble"]


def test_protected_members_are_derived() -> None:
    """Single-underscore members belong to the contract, mangled ones do not."""
    contract = Contract.of(Person)

    assert [m.name for m in contract.members] == ["_ssn", "_execute"]
    ssn = contract.prop("_ssn")
    assert ssn.type is int
    assert ssn.writable
    assert [p.name for p in contract.method("_execute").params] == ["cmd"]
    assert "_Person__audit" not in contract


def test_from_class_is_cached() -> None:
    """Deriving the same class twice yields the same contract."""
    assert Contract.of(IFoo) is Contract.of(IFoo)


def test_variadic_parameters_are_rejected() -> None:
    """Contracts need fixed signatures."""
    with pytest.raises(ConfigurationError, match="variadic"):
        Contract.of(_Variadic)


def test_explicit_contracts_reject_duplicates() -> None:
    """Member names must be unique."""
    with pytest.raises(ConfigurationError, match="twice"):
        Contract("Dup", (Method("run"), Property("run")))


def test_unknown_member_lookup_fails() -> None:
    """Lookups of undeclared members raise ``ConfigurationError``."""
    contract = Contract("Svc", (Method("run"), Event("done")))
    assert "run" in contract
    assert "stop" not in contract
    with pytest.raises(ConfigurationError, match="no member named 'stop'"):
        contract.member("stop")
    with pytest.raises(ConfigurationError, match="is not a property"):
        contract.prop("run")


def test_method_bind_applies_defaults() -> None:
    """Binding fills defaults and rejects calls a real implementation would."""
    method = Method("greet", (Param("name"), Param("punctuation", default="!")))

    assert method.bind(("Ada",), {}) == ("Ada", "!")
    assert method.bind((), {"name": "Ada", "punctuation": "?"}) == ("Ada", "?")
    with pytest.raises(TypeError):
        method.bind(("Ada", "!", "extra"), {})


def test_param_index() -> None:
    """Parameters are addressable by name or position."""
    method = Contract.of(IFoo).method("try_parse")
    assert method.param_index("output") == 1
    assert method.param_index(0) == 0
    with pytest.raises(ConfigurationError):
        method.param_index(2)
    with pytest.raises(ConfigurationError):
        method.param_index("missing")


def test_contract_of_rejects_instances() -> None:
    """Only classes and contracts describe mockable types."""
    with pytest.raises(TypeError):
        Contract.of(t.cast("type", 42))


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [
        (IFoo, True),
        (INode, True),
        (IAnimal, True),
        (Contract("Svc"), True),
        (_Plain, False),
        (str, False),
        (None, False),
        (abc.ABC, False),
    ],
)
def test_is_contract_type(candidate: object, expected: bool) -> None:
    """Protocols, abstract classes and contracts can back child mocks."""
    assert is_contract_type(candidate) is expected


def test_slots_box_values() -> None:
    """Slots start empty and expose assigned values."""
    out: Out[str] = Out()
    assert out.value is None
    assert not out.is_set
    out.value = "ok"
    assert out.is_set
    assert repr(out) == "Out('ok')"
    assert Ref(3).value == 3
